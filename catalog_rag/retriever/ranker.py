"""
Relevance Ranker

Orders OR-search candidates by how many distinct search terms each product
mentions. Used only by the multi-term strategy.
"""

from typing import List, Sequence

from ..common.schemas import Product


def count_term_matches(product: Product, search_terms: Sequence[str]) -> int:
    """Number of distinct search terms found as substrings of the product text"""
    text = product.search_text
    return sum(1 for term in set(search_terms) if term in text)


def rank_by_term_matches(
    products: Sequence[Product],
    search_terms: Sequence[str],
) -> List[Product]:
    """
    Sort products by term-match count, highest first.

    The sort is stable, so products with equal counts keep the backend's
    order. Scores are not attached to the returned products.
    """
    scored = [(count_term_matches(p, search_terms), p) for p in products]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [product for _, product in scored]
