"""Tests for the fragment accumulator."""

import asyncio

from safechat.conversation import accumulate


async def _fragments(items, pulled=None):
    for item in items:
        if pulled is not None:
            pulled.append(item)
        yield item


async def _collect(items):
    return [snapshot async for snapshot in accumulate(_fragments(items))]


def test_snapshots_grow_one_per_fragment():
    assert asyncio.run(_collect(["Hi", " there", "!"])) == ["Hi", "Hi there", "Hi there!"]


def test_empty_stream_yields_nothing():
    assert asyncio.run(_collect([])) == []


def test_empty_fragments_still_produce_snapshots():
    assert asyncio.run(_collect(["a", "", "b"])) == ["a", "a", "ab"]


def test_same_fragments_give_same_snapshots():
    fragments = ["The", " quick", " brown", " fox"]
    assert asyncio.run(_collect(fragments)) == asyncio.run(_collect(fragments))


def test_stops_pulling_when_consumer_stops():
    pulled = []

    async def take_one():
        snapshots = accumulate(_fragments(["a", "b", "c"], pulled))
        first = await snapshots.__anext__()
        await snapshots.aclose()
        return first

    assert asyncio.run(take_one()) == "a"
    assert pulled == ["a"]
