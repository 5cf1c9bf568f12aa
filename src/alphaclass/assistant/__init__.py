"""
Assistant

Context summaries and conversation threading for the chat assistant.
"""

from .context import AssistantContext, build_system_prompt, summarize
from .conversations import ChatResult, ChatService, ConversationManager, derive_title

__all__ = [
    "AssistantContext",
    "ChatResult",
    "ChatService",
    "ConversationManager",
    "build_system_prompt",
    "derive_title",
    "summarize",
]
