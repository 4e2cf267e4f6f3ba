"""
RAG Service

Caller-facing facade over the retrieval core: retrieve products for a
query, format them for a prompt, and summarize the outcome.
"""

import logging
from typing import Optional, Sequence

from ..common.catalog_client import CatalogClient
from ..common.config import RetrievalConfig
from ..common.schemas import Product
from .analytics import RetrievalAnalytics, get_retrieval_analytics
from .context_formatter import format_products_for_context
from .query_processor import ParsedQuery, QueryProcessor
from .searcher import RetrievalResult, Searcher

logger = logging.getLogger("catalog_rag.retriever.service")


class RAGService:
    """
    Product retrieval for prompt augmentation.

    Usage:
        service = RAGService(catalog_client, RetrievalConfig(max_results=5))
        result = await service.retrieve_relevant_products("industrial pump")
        context = service.format_products_for_context(result.products)
        analytics = service.get_retrieval_analytics(result)
    """

    def __init__(
        self,
        catalog_client: CatalogClient,
        config: Optional[RetrievalConfig] = None,
        table: str = "products",
    ):
        self._config = config or RetrievalConfig()
        self._processor = QueryProcessor(self._config)
        self._searcher = Searcher(
            catalog_client,
            config=self._config,
            table=table,
            query_processor=self._processor,
        )

    @property
    def config(self) -> RetrievalConfig:
        return self._config

    def preprocess_query(self, query: str) -> ParsedQuery:
        """Parse a query without searching"""
        return self._processor.parse(query)

    async def retrieve_relevant_products(self, query: str) -> RetrievalResult:
        """
        Multi-strategy retrieval with fallback.

        Raises:
            TypeError: If query is not a string
        """
        return await self.search(self._processor.parse(query))

    async def search(self, parsed: ParsedQuery) -> RetrievalResult:
        """Retrieve products for a query that was already parsed"""
        result = await self._searcher.search(parsed)
        logger.debug(
            "Retrieved %d product(s) via %s (intent=%s, terms=%s)",
            len(result.products), result.strategy.value, parsed.intent.value, parsed.search_terms,
        )
        return result

    def format_products_for_context(self, products: Sequence[Product]) -> str:
        """Format products for context injection within the configured budget"""
        return format_products_for_context(products, self._config.context_window_size)

    def get_retrieval_analytics(self, result: RetrievalResult) -> RetrievalAnalytics:
        """Get retrieval analytics for monitoring"""
        return get_retrieval_analytics(result)
