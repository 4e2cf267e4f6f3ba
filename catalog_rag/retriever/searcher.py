"""
Searcher

Retrieves catalog products with a three-strategy lexical cascade:

1. Exact phrase   - the raw query as a quoted phrase (highest precision)
2. Multi-term OR  - any search term, over-fetched 2x and ranked by term matches
3. Single term    - the first three terms one at a time, merged by name

Strategies run strictly in order and the first one that returns products
wins. Catalog failures never escape a strategy: they are logged and the
strategy yields nothing, so the cascade moves on.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from ..common.catalog_client import CatalogClient, is_phrase_query
from ..common.config import RetrievalConfig
from ..common.schemas import Product, PRODUCT_FIELDS
from .query_processor import ParsedQuery, QueryProcessor
from .ranker import rank_by_term_matches

logger = logging.getLogger("catalog_rag.retriever.searcher")


class RetrievalStrategy(str, Enum):
    """Strategy that produced a retrieval result"""
    NO_TERMS = "no_terms"
    EXACT_PHRASE = "exact_phrase"
    MULTI_TERM = "multi_term"
    SINGLE_TERM_FALLBACK = "single_term_fallback"


@dataclass(frozen=True)
class RetrievalResult:
    """Outcome of one retrieval call"""
    products: Tuple[Product, ...] = field(default_factory=tuple)
    search_terms: Tuple[str, ...] = field(default_factory=tuple)
    strategy: RetrievalStrategy = RetrievalStrategy.NO_TERMS

    @property
    def has_results(self) -> bool:
        return len(self.products) > 0


class Searcher:
    """
    Searches the product catalog with cascading fallback.

    Features:
    - Exact phrase, multi-term and single-term strategies
    - Relevance ranking for multi-term candidates
    - Name-based deduplication for single-term results
    - Per-call timeout on every catalog request
    """

    # Single-term fallback limits
    FALLBACK_MAX_TERMS = 3
    FALLBACK_PER_TERM_LIMIT = 5

    def __init__(
        self,
        catalog_client: CatalogClient,
        config: Optional[RetrievalConfig] = None,
        table: str = "products",
        query_processor: Optional[QueryProcessor] = None,
    ):
        """
        Initialize searcher.

        Args:
            catalog_client: Text-search capable catalog backend
            config: Retrieval configuration
            table: Product table / collection name
            query_processor: Optional processor (defaults to one sharing config)
        """
        self._client = catalog_client
        self._config = config or RetrievalConfig()
        self._table = table
        self._processor = query_processor or QueryProcessor(self._config)

    @property
    def config(self) -> RetrievalConfig:
        return self._config

    async def retrieve(self, query: str) -> RetrievalResult:
        """
        Retrieve the most relevant products for a raw query.

        Args:
            query: Raw user query

        Returns:
            RetrievalResult with at most max_results products
        """
        parsed = self._processor.parse(query)
        return await self.search(parsed)

    async def search(self, parsed: ParsedQuery) -> RetrievalResult:
        """Run the strategy cascade for an already parsed query"""
        if not parsed.has_terms:
            return RetrievalResult(strategy=RetrievalStrategy.NO_TERMS)

        search_terms = tuple(parsed.search_terms)

        products = await self._exact_phrase_search(parsed.original)
        if products:
            return self._result(products, search_terms, RetrievalStrategy.EXACT_PHRASE)

        products = await self._multi_term_search(parsed.search_terms)
        if products:
            return self._result(products, search_terms, RetrievalStrategy.MULTI_TERM)

        products = await self._single_term_fallback(parsed.search_terms)
        return self._result(products, search_terms, RetrievalStrategy.SINGLE_TERM_FALLBACK)

    def _result(
        self,
        products: List[Product],
        search_terms: Tuple[str, ...],
        strategy: RetrievalStrategy,
    ) -> RetrievalResult:
        """Build the final result, capped at max_results for every strategy"""
        return RetrievalResult(
            products=tuple(products[:self._config.max_results]),
            search_terms=search_terms,
            strategy=strategy,
        )

    async def _query_catalog(self, expression: str, limit: int) -> Dict[str, Any]:
        """Issue one catalog call bounded by the configured timeout."""
        return await asyncio.wait_for(
            self._client.text_search(self._table, PRODUCT_FIELDS, expression, limit),
            timeout=self._config.search_timeout,
        )

    async def _exact_phrase_search(self, query: str) -> List[Product]:
        """Exact phrase search for high precision"""
        try:
            # An already quoted query is not quoted twice
            phrase = query[1:-1] if is_phrase_query(query) else query
            raw_result = await self._query_catalog(f'"{phrase}"', self._config.max_results)

            if not raw_result.get("ok"):
                logger.warning("Exact phrase search failed: %s", raw_result.get("error"))
                return []

            return self._to_products(raw_result.get("results"))

        except asyncio.TimeoutError:
            logger.warning("Exact phrase search timed out after %.1fs", self._config.search_timeout)
            return []
        except Exception as e:
            logger.error("Exact phrase search error: %s", e, exc_info=True)
            return []

    async def _multi_term_search(self, search_terms: List[str]) -> List[Product]:
        """Multi-term OR search for broader coverage, ranked by term matches"""
        try:
            raw_result = await self._query_catalog(
                " | ".join(search_terms),
                self._config.max_results * 2,  # headroom for ranking
            )

            if not raw_result.get("ok"):
                logger.warning("Multi-term search failed: %s", raw_result.get("error"))
                return []

            candidates = self._to_products(raw_result.get("results"))
            return rank_by_term_matches(candidates, search_terms)

        except asyncio.TimeoutError:
            logger.warning("Multi-term search timed out after %.1fs", self._config.search_timeout)
            return []
        except Exception as e:
            logger.error("Multi-term search error: %s", e, exc_info=True)
            return []

    async def _single_term_fallback(self, search_terms: List[str]) -> List[Product]:
        """
        Single term fallback for maximum recall.

        Terms are searched one after another so the merged order is
        deterministic; a failed term is skipped, an exception or timeout
        abandons the strategy.
        """
        try:
            all_results: List[Product] = []

            for term in search_terms[:self.FALLBACK_MAX_TERMS]:
                raw_result = await self._query_catalog(term, self.FALLBACK_PER_TERM_LIMIT)

                if not raw_result.get("ok"):
                    logger.warning("Single term search for %r failed: %s", term, raw_result.get("error"))
                    continue

                all_results.extend(self._to_products(raw_result.get("results")))

            return self._dedupe_by_name(all_results)

        except asyncio.TimeoutError:
            logger.warning("Single term fallback timed out after %.1fs", self._config.search_timeout)
            return []
        except Exception as e:
            logger.error("Single term fallback error: %s", e, exc_info=True)
            return []

    @staticmethod
    def _dedupe_by_name(products: List[Product]) -> List[Product]:
        """Remove duplicates by product name, keeping the first occurrence"""
        seen_names = set()
        unique = []
        for product in products:
            if product.name not in seen_names:
                seen_names.add(product.name)
                unique.append(product)
        return unique

    def _to_products(self, rows: Optional[List[Dict[str, Any]]]) -> List[Product]:
        """Convert raw catalog rows to Product records, skipping invalid rows"""
        products = []
        for row in rows or []:
            try:
                products.append(self._to_product(row))
            except ValidationError as e:
                logger.warning("Skipping invalid catalog row %r: %s", row.get("name"), e)
        return products

    @staticmethod
    def _to_product(raw: Dict[str, Any]) -> Product:
        """Convert a raw row to a Product"""
        return Product(
            name=raw.get("name", ""),
            description=raw.get("description") or "",
            category=raw.get("category") or "",
            price=raw.get("price") or 0.0,
            in_stock=bool(raw.get("in_stock", False)),
        )
