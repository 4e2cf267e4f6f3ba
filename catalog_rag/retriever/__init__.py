"""
Catalog Retriever - Product Context Retrieval

Finds catalog products relevant to a user query and renders them for
injection into an LLM prompt.

Key Components:
- QueryProcessor: Search terms, intent and entities from raw text
- Searcher: Exact phrase -> multi-term -> single-term cascade
- rank_by_term_matches: Relevance ordering for multi-term candidates
- format_products_for_context: Character-budgeted context block
- get_retrieval_analytics: Monitoring summary
- RAGService: Facade bundling the above

Pipeline:
1. Parse user query (terms, intent, entities)
2. Search the catalog, falling back strategy by strategy
3. Format products for the prompt
4. Report analytics
"""

from .query_processor import QueryProcessor, ParsedQuery, QueryIntent
from .searcher import Searcher, RetrievalResult, RetrievalStrategy
from .ranker import rank_by_term_matches
from .context_formatter import format_products_for_context
from .analytics import RetrievalAnalytics, get_retrieval_analytics
from .service import RAGService

__all__ = [
    "QueryProcessor",
    "ParsedQuery",
    "QueryIntent",
    "Searcher",
    "RetrievalResult",
    "RetrievalStrategy",
    "rank_by_term_matches",
    "format_products_for_context",
    "RetrievalAnalytics",
    "get_retrieval_analytics",
    "RAGService",
]
