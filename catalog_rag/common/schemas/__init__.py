"""
Catalog RAG Schemas

Record types shared by the catalog client and the retriever.
"""

from .product import Product, PRODUCT_FIELDS

__all__ = [
    "Product",
    "PRODUCT_FIELDS",
]
