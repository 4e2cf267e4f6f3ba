"""
Chat Assistant

Answers customer questions about the catalog: retrieves products for the
message, injects them as context, and asks the LLM for a reply.

Conversation history is supplied by the caller on every call and never
stored here.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from ..common.llm_client import ChatTurn, LLMClient
from ..retriever.analytics import RetrievalAnalytics
from ..retriever.service import RAGService
from .prompts import SYSTEM_INSTRUCTION, build_contextual_message

logger = logging.getLogger("catalog_rag.assistant.chat")


@dataclass
class ChatReply:
    """Assistant reply plus retrieval metadata"""
    answer: str
    strategy: str
    product_count: int
    analytics: Optional[RetrievalAnalytics] = None
    product_names: List[str] = field(default_factory=list)


def normalize_history(history: Optional[List[Dict[str, Any]]]) -> List[ChatTurn]:
    """
    Convert caller history into LLM chat turns.

    Accepts both ``{"role", "content"}`` turns and the chat UI's
    ``{"sender": "user" | "bot", "text"}`` messages.

    Raises:
        ValueError: If an entry has neither shape
    """
    turns: List[ChatTurn] = []
    for i, message in enumerate(history or []):
        if not isinstance(message, dict):
            raise ValueError(f"history[{i}] must be an object, got {type(message).__name__}")

        if "sender" in message:
            role = "user" if message["sender"] == "user" else "assistant"
            text = message.get("text", "")
        elif "role" in message:
            role = "user" if message["role"] == "user" else "assistant"
            text = message.get("content", "")
        else:
            raise ValueError(f"history[{i}] needs either 'sender' or 'role'")

        turns.append({"role": role, "content": str(text)})
    return turns


class ChatAssistant:
    """
    Retrieval-augmented customer support assistant.

    Usage:
        assistant = ChatAssistant(rag_service, llm_client)
        reply = await assistant.answer("Do you have an industrial pump?")
    """

    def __init__(
        self,
        rag_service: RAGService,
        llm_client: LLMClient,
        system_instruction: str = SYSTEM_INSTRUCTION,
        max_tokens: int = 1024,
        timeout: float = 30.0,
    ):
        self._rag = rag_service
        self._llm = llm_client
        self._system = system_instruction
        self._max_tokens = max_tokens
        self._timeout = timeout

    @property
    def has_llm(self) -> bool:
        return self._llm.is_available

    async def answer(
        self,
        message: str,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> ChatReply:
        """
        Answer a user message with retrieved product context.

        Raises:
            TypeError: If message is not a string
            ValueError: If message is empty or history is malformed
            RuntimeError: If no LLM is available
        """
        if not isinstance(message, str):
            raise TypeError(f"message must be a string, got {type(message).__name__}")
        if not message.strip():
            raise ValueError("message must not be empty")

        turns = normalize_history(history)

        if not self.has_llm:
            raise RuntimeError("LLM client is not available")

        result = await self._rag.retrieve_relevant_products(message)
        analytics = self._rag.get_retrieval_analytics(result)
        logger.info("RAG analytics: %s", analytics.to_dict())

        context = self._rag.format_products_for_context(result.products) if result.has_results else ""
        contextual_message = build_contextual_message(context, message)

        answer = await asyncio.to_thread(
            self._llm.generate,
            contextual_message,
            system=self._system,
            history=turns,
            max_tokens=self._max_tokens,
            timeout=self._timeout,
        )

        return ChatReply(
            answer=answer,
            strategy=result.strategy.value,
            product_count=len(result.products),
            analytics=analytics,
            product_names=[p.name for p in result.products],
        )
