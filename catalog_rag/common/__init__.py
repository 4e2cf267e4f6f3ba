"""
Catalog RAG Common Module

Shared infrastructure for the retriever and the assistant.
"""

from .config import CatalogRagConfig, RetrievalConfig, load_config
from .catalog_client import (
    CatalogClient,
    InMemoryCatalogClient,
    SupabaseCatalogClient,
    create_catalog_client,
)
from .llm_client import LLMClient

__all__ = [
    "CatalogRagConfig",
    "RetrievalConfig",
    "load_config",
    "CatalogClient",
    "InMemoryCatalogClient",
    "SupabaseCatalogClient",
    "create_catalog_client",
    "LLMClient",
]
