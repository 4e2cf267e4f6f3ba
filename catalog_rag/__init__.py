"""
Catalog RAG

Lexical retrieval-augmented generation over a product catalog.

Philosophy:
- Deterministic, explainable, rule-based retrieval (no embeddings)
- Cascade from precise to broad: exact phrase -> any term -> single terms
- Catalog failures degrade to fewer results, never to errors
- Bounded, plain-text context for the downstream prompt

Usage:
    from catalog_rag.common import load_config, InMemoryCatalogClient
    from catalog_rag.retriever import RAGService
    from catalog_rag.assistant import ChatAssistant
"""

__version__ = "0.1.0"
