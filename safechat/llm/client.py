"""Streaming LLM client.

Wraps the Anthropic async SDK behind the single call the conversation
pipeline needs: stream the assistant's reply to a chat history.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

import anthropic

from safechat.config import CompletionConfig

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin wrapper around :class:`anthropic.AsyncAnthropic`.

    Parameters
    ----------
    config : CompletionConfig
        Must carry an API key; construction fails fast otherwise.
    client : anthropic.AsyncAnthropic | None
        Optional pre-built SDK client (used by tests).
    """

    def __init__(
        self,
        config: CompletionConfig,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        self.config = config.require()
        self._client = client or anthropic.AsyncAnthropic(api_key=self.config.api_key)

    @property
    def model(self) -> str:
        return self.config.model

    async def stream_chat(
        self,
        messages: list[dict[str, str]],
        system_prompt: str,
    ) -> AsyncGenerator[str, None]:
        """Stream reply fragments for *messages* as an async generator.

        Fragments are yielded in production order.  Closing the generator
        leaves the SDK stream context, which closes the HTTP response.
        """
        kwargs: dict = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": messages,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        logger.debug("Streaming completion: model=%s messages=%d", self.config.model, len(messages))
        async with self._client.messages.stream(**kwargs) as stream:
            async for text in stream.text_stream:
                yield text
