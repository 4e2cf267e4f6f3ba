"""
Context Formatter

Renders retrieved products into a text block for prompt injection.

The size budget counts characters, not tokens. Each entry is checked
against the budget before it is appended; once an entry would overflow,
an omission line replaces the rest of the list.
"""

from typing import Sequence

from ..common.schemas import Product


CONTEXT_HEADER = "\n**Available Product Information:**\n"

PRODUCT_ENTRY_TEMPLATE = """{index}. **{name}**
   - Description: {description}
   - Category: {category}
   - Price: ${price}
   - In Stock: {in_stock}

"""

OMISSION_TEMPLATE = "... ({remaining} more products available)\n"

CONTEXT_FOOTER = "---\n"


def format_price(price: float) -> str:
    """Render a price without a trailing .0 for whole amounts"""
    value = float(price)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def render_product_entry(index: int, product: Product) -> str:
    """Render one numbered product entry (1-based index)"""
    return PRODUCT_ENTRY_TEMPLATE.format(
        index=index,
        name=product.name,
        description=product.description,
        category=product.category,
        price=format_price(product.price),
        in_stock="Yes" if product.in_stock else "No",
    )


def format_products_for_context(
    products: Sequence[Product],
    context_window_size: int = 4000,
) -> str:
    """
    Format products for context injection.

    Args:
        products: Ranked products
        context_window_size: Character budget for header plus entries

    Returns:
        Formatted block, or "" when there are no products
    """
    if not products:
        return ""

    context = CONTEXT_HEADER
    current_length = len(context)

    for i, product in enumerate(products):
        entry = render_product_entry(i + 1, product)

        if current_length + len(entry) > context_window_size:
            context += OMISSION_TEMPLATE.format(remaining=len(products) - i)
            break

        context += entry
        current_length += len(entry)

    return context + CONTEXT_FOOTER
