"""
Catalog Assistant

Customer-support chat on top of the retriever: product context is injected
into the user's message before the LLM call.
"""

from .chat import ChatAssistant, ChatReply, normalize_history
from .prompts import SYSTEM_INSTRUCTION, build_contextual_message

__all__ = [
    "ChatAssistant",
    "ChatReply",
    "normalize_history",
    "SYSTEM_INSTRUCTION",
    "build_contextual_message",
]
