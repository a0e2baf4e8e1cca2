"""Completion engine integration.

Provides a thin streaming wrapper around the Anthropic API and the fixed
assistant system prompt.
"""

from safechat.llm.client import LLMClient
from safechat.llm.prompts import CONVERSATION_STARTERS, SYSTEM_PROMPT

__all__ = [
    "CONVERSATION_STARTERS",
    "LLMClient",
    "SYSTEM_PROMPT",
]
