"""
Catalog MCP Server.

Transport: stdio.

Exposes product retrieval and the retrieval-augmented assistant as MCP tools.

Expected MCP Tool Return Format:
{
    "ok": bool,
    ...,                     # Tool-specific fields if ok is True
    "error": str             # Present if ok is False
}
"""

import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Annotated, Dict, List, Optional

from dotenv import load_dotenv
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from ..common.catalog_client import CatalogClient, InMemoryCatalogClient, create_catalog_client
from ..common.config import LOGS_DIR, CatalogRagConfig, ensure_directories, load_config
from ..common.llm_client import LLMClient
from ..retriever.service import RAGService
from .chat import ChatAssistant

logger = logging.getLogger("catalog_rag.mcp")


class CatalogMCPServerApp:
    """
    Main application class for the catalog MCP server.

    The retrieval tools only need a catalog client; ``ask_catalog`` also
    needs a chat assistant with an available LLM.
    """

    def __init__(
        self,
        rag_service: RAGService,
        chat_assistant: Optional[ChatAssistant] = None,
        mcp_server_name: str = "catalog_rag",
    ) -> None:
        """
        Initializes the server with the retrieval service and optional assistant.

        Args:
            rag_service (RAGService): Retrieval facade over the catalog.
            chat_assistant (ChatAssistant): Optional LLM-backed assistant.
            mcp_server_name (str): The name of the MCP server.
        """
        self.rag = rag_service
        self.assistant = chat_assistant
        self.mcp = FastMCP(name=mcp_server_name)

        # ---------- MCP Tools: Search Catalog ---------- #
        @self.mcp.tool(
            name="search_catalog",
            description=(
                "Find catalog products relevant to a free-text question. "
                "Returns the matched products, a formatted context block ready "
                "for prompt injection, and retrieval analytics."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_search_catalog(
            query: Annotated[str, Field(description="natural language product question")],
        ) -> Dict[str, Any]:
            """
            Retrieve products with the exact phrase / multi-term / single-term cascade.

            Args:
                query (str): The user's question.

            Returns:
                Dict[str, Any]: Products, formatted context, intent and analytics.
            """
            try:
                parsed = self.rag.preprocess_query(query)
                result = await self.rag.search(parsed)
            except TypeError as exc:
                raise ToolError(f"Invalid query parameter: {exc}") from exc

            analytics = self.rag.get_retrieval_analytics(result)
            return {
                "ok": True,
                "products": [p.to_dict() for p in result.products],
                "context": self.rag.format_products_for_context(result.products),
                "intent": parsed.intent.value,
                "entities": parsed.entities,
                "analytics": analytics.to_dict(),
            }

        # ---------- MCP Tools: Ask Catalog ---------- #
        @self.mcp.tool(
            name="ask_catalog",
            description=(
                "Answer a customer question about the product catalog. "
                "Relevant products are retrieved and given to the LLM as context. "
                "Pass earlier turns in `history` to continue a conversation."
            ),
            annotations=ToolAnnotations(readOnlyHint=True, destructiveHint=False)
        )
        async def tool_ask_catalog(
            message: Annotated[str, Field(description="the customer's message")],
            history: Annotated[Optional[List[Dict[str, Any]]], Field(
                description="previous turns as {sender: user|bot, text} or {role, content}"
            )] = None,
        ) -> Dict[str, Any]:
            """
            Retrieval-augmented answer for one customer message.

            Args:
                message (str): The customer's message.
                history (List[Dict]): Earlier conversation turns.

            Returns:
                Dict[str, Any]: Answer text with retrieval strategy and product count.
            """
            if self.assistant is None:
                return {
                    "ok": False,
                    "error": "Assistant not configured. Set an LLM API key (e.g. GOOGLE_API_KEY).",
                }

            try:
                reply = await self.assistant.answer(message, history)
            except (TypeError, ValueError) as exc:
                raise ToolError(f"Invalid request: {exc}") from exc
            except Exception as e:
                logger.error("Chat error: %s", e, exc_info=True)
                return {"ok": False, "error": str(e)}

            return {
                "ok": True,
                "answer": reply.answer,
                "strategy": reply.strategy,
                "product_count": reply.product_count,
                "products": reply.product_names,
            }

    def run(self) -> None:
        """Runs the MCP server using stdio transport."""
        self.mcp.run(transport="stdio")


def load_catalog_file(path: str) -> InMemoryCatalogClient:
    """Load a JSON array of product rows into an in-memory catalog"""
    with open(Path(path).expanduser()) as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ValueError(f"{path} must contain a JSON array of products")
    return InMemoryCatalogClient(rows)


def build_app(
    config: CatalogRagConfig,
    catalog_client: CatalogClient,
    server_name: str = "catalog_rag",
) -> CatalogMCPServerApp:
    """Wire services from configuration"""
    rag_service = RAGService(catalog_client, config.retrieval, table=config.backend.table)

    llm_client = LLMClient(
        provider=config.llm.provider,
        model=config.llm.model,
        anthropic_api_key=config.llm.anthropic_api_key,
        openai_api_key=config.llm.openai_api_key,
        google_api_key=config.llm.google_api_key,
    )
    assistant = None
    if llm_client.is_available:
        assistant = ChatAssistant(rag_service, llm_client)
        logger.info("Assistant enabled (%s / %s)", config.llm.provider, config.llm.model)
    else:
        logger.info("LLM not configured - ask_catalog tool will be unavailable")

    return CatalogMCPServerApp(
        rag_service=rag_service,
        chat_assistant=assistant,
        mcp_server_name=server_name,
    )


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Run the catalog RAG MCP server (stdio).")
    parser.add_argument(
        "--server-name",
        default="catalog_rag",
        help="Advertised MCP server name.",
    )
    parser.add_argument(
        "--catalog-file",
        default=None,
        help="JSON array of products to serve from memory instead of Supabase.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level.",
    )
    args = parser.parse_args(argv)

    # stdout carries the MCP protocol; log to stderr and a file
    ensure_directories()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(LOGS_DIR / "server.log"),
        ],
    )

    config = load_config()

    if args.catalog_file:
        catalog_client = load_catalog_file(args.catalog_file)
        logger.info("Serving %d products from %s", len(catalog_client), args.catalog_file)
    else:
        catalog_client = create_catalog_client(config.backend)
        if catalog_client is None:
            logger.error("No catalog configured. Set SUPABASE_URL / SUPABASE_ANON_KEY or pass --catalog-file.")
            raise SystemExit(1)

    app = build_app(config, catalog_client, server_name=args.server_name)

    def _handle_shutdown(signum, frame):
        raise SystemExit(0)
    for sig in (signal.SIGINT, getattr(signal, "SIGTERM", None)):
        if sig is not None:
            signal.signal(sig, _handle_shutdown)

    app.run()


if __name__ == "__main__":
    main()
