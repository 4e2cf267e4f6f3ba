"""
Catalog Client

Text-search access to the product catalog.

Every client answers the same call, ``text_search(table, columns, query, limit)``,
where ``query`` is one of three expression forms:

- ``"industrial pump"``  quoted exact phrase
- ``pump | valve``       OR-joined terms
- ``pump``               single bare term

and returns the usual result envelope::

    {"ok": True, "results": [row, ...]}
    {"ok": False, "error": "..."}

Clients may also raise; callers treat both failure shapes the same way.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence

from postgrest.exceptions import APIError as PostgrestAPIError
from supabase import AsyncClient, create_async_client

from .config import BackendConfig

logger = logging.getLogger("catalog_rag.common.catalog_client")


def is_phrase_query(query: str) -> bool:
    """Check if a search expression is a quoted exact phrase"""
    return len(query) >= 2 and query.startswith('"') and query.endswith('"')


class CatalogClient(ABC):
    """Full-text search capability over a product table."""

    @abstractmethod
    async def text_search(
        self,
        table: str,
        columns: Sequence[str],
        query: str,
        limit: int,
    ) -> Dict[str, Any]:
        """
        Search ``table`` with a text-search expression.

        Args:
            table: Record collection name
            columns: Fields to project from each row
            query: Phrase, OR-joined or single-term expression
            limit: Maximum number of rows

        Returns:
            Result dict with ok/error status
        """

    async def close(self) -> None:
        """Release any held resources"""


class SupabaseCatalogClient(CatalogClient):
    """
    Catalog client for a Supabase ``products`` table.

    Matches against the table's tsvector column with ``text_search``. A
    quoted phrase is sent as a phrase query (phraseto_tsquery), everything
    else as a plain tsquery, where ``|`` means OR.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        search_column: str = "fts",
        text_search_config: str = "",
        client: Optional[AsyncClient] = None,
    ):
        """
        Initialize Supabase catalog client.

        Args:
            url: Project URL (e.g. https://xyz.supabase.co)
            api_key: Anon or service key
            search_column: tsvector column to search
            text_search_config: Optional text search configuration (e.g. "english")
            client: Already connected async client (created lazily otherwise)
        """
        self.url = url
        self.key = api_key
        self._search_column = search_column
        self._text_search_config = text_search_config
        self.client: Optional[AsyncClient] = client
        self._client_lock = asyncio.Lock()

    async def _get_client(self) -> AsyncClient:
        """Lazy load the async Supabase client"""
        async with self._client_lock:
            if self.client is None:
                self.client = await create_async_client(self.url, self.key)
        return self.client

    def _search_args(self, query: str):
        """Split an expression into the text_search query and its options"""
        options: Dict[str, Any] = {}
        if self._text_search_config:
            options["config"] = self._text_search_config

        if is_phrase_query(query):
            options["type"] = "phrase"
            return query[1:-1], options
        return query, options

    async def text_search(
        self,
        table: str,
        columns: Sequence[str],
        query: str,
        limit: int,
    ) -> Dict[str, Any]:
        expression, options = self._search_args(query)
        client = await self._get_client()

        try:
            response = await (
                client.table(table)
                .select(",".join(columns))
                .text_search(self._search_column, expression, options=options)
                .limit(limit)
                .execute()
            )
        except PostgrestAPIError as e:
            return {"ok": False, "error": e.message or str(e)}

        return {"ok": True, "results": response.data or []}


class InMemoryCatalogClient(CatalogClient):
    """
    Lexical catalog held in memory.

    Matches case-insensitively against name, description and category,
    following the same three expression forms as the database.
    """

    def __init__(self, rows: Optional[Iterable[Dict[str, Any]]] = None):
        self._rows: List[Dict[str, Any]] = [dict(r) for r in (rows or [])]

    def add(self, row: Dict[str, Any]) -> None:
        self._rows.append(dict(row))

    def __len__(self) -> int:
        return len(self._rows)

    @staticmethod
    def _row_text(row: Dict[str, Any]) -> str:
        return " ".join(
            str(row.get(key, "")) for key in ("name", "description", "category")
        ).lower()

    @staticmethod
    def _matcher(query: str):
        if is_phrase_query(query):
            phrase = query[1:-1].strip().lower()
            return lambda text: bool(phrase) and phrase in text

        terms = [t.strip().lower() for t in query.split("|") if t.strip()]
        return lambda text: any(term in text for term in terms)

    async def text_search(
        self,
        table: str,
        columns: Sequence[str],
        query: str,
        limit: int,
    ) -> Dict[str, Any]:
        matches = self._matcher(query)
        results = []
        for row in self._rows:
            if len(results) >= limit:
                break
            if matches(self._row_text(row)):
                results.append({key: row.get(key) for key in columns if key in row})
        return {"ok": True, "results": results}


def create_catalog_client(config: BackendConfig) -> Optional[CatalogClient]:
    """
    Factory function to create a catalog client from configuration.

    Returns:
        SupabaseCatalogClient if a backend URL is configured, None otherwise
    """
    if not config.url:
        logger.info("Catalog backend not configured (SUPABASE_URL missing)")
        return None
    if not config.api_key:
        logger.warning("Catalog backend URL set without an API key; requests may be rejected")

    return SupabaseCatalogClient(
        url=config.url,
        api_key=config.api_key,
        search_column=config.search_column,
        text_search_config=config.text_search_config,
    )
