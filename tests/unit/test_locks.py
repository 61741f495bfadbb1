"""Unit tests for keyed locks."""

import asyncio

from video_diary.commons.locks import KeyedLock


class TestKeyedLock:
    """Tests for KeyedLock."""

    async def test_same_key_same_lock(self):
        locks = KeyedLock()
        assert locks("a") is locks.get("a")
        assert locks("a") is not locks("b")
        assert len(locks) == 2

    async def test_serializes_same_key(self):
        locks = KeyedLock()
        order: list[str] = []

        async def worker(name: str):
            async with locks("segment"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("one"), worker("two"))

        assert order == ["one-start", "one-end", "two-start", "two-end"]

    async def test_different_keys_interleave(self):
        locks = KeyedLock()
        order: list[str] = []

        async def worker(key: str):
            async with locks(key):
                order.append(f"{key}-start")
                await asyncio.sleep(0.01)
                order.append(f"{key}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order[:2] == ["a-start", "b-start"]
