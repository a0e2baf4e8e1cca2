"""Fold a fragment stream into growing full-text snapshots."""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator


async def accumulate(fragments: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield ``"".join(fragments[:i + 1])`` for each fragment, in order.

    Nothing is pulled from *fragments* until the consumer asks for the next
    snapshot, so abandoning the iterator stops all further work.
    """
    text = ""
    async for fragment in fragments:
        text += fragment
        yield text
