"""Fake chat session for testing the bridge without a real IRC server."""

from __future__ import annotations

import asyncio


class FakeSession:
    """ChatSession that records every call.

    open_results: outcomes for successive open() calls; an exception instance
    is raised, None succeeds. When exhausted, open() succeeds.
    """

    def __init__(self, *, yield_on_send: bool = False) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.open_results: list[BaseException | None] = []
        self.opened = 0
        self.closed = False
        self.failing: set[str] = set()
        self._yield_on_send = yield_on_send

    async def open(self) -> None:
        self.opened += 1
        if self.open_results:
            result = self.open_results.pop(0)
            if result is not None:
                raise result

    async def close(self) -> None:
        self.closed = True

    async def _record(self, op: str, *args: str) -> None:
        self.calls.append((op, *args))
        if self._yield_on_send:
            await asyncio.sleep(0)
        if op in self.failing:
            raise ConnectionError("not connected")

    async def send_message(self, target: str, text: str) -> None:
        await self._record("message", target, text)

    async def send_notice(self, target: str, text: str) -> None:
        await self._record("notice", target, text)

    async def join_channel(self, channel: str) -> None:
        await self._record("join", channel)

    async def part_channel(self, channel: str) -> None:
        await self._record("part", channel)

    def joins(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "join"]

    def clear(self) -> None:
        self.calls.clear()


def messages_at(records: list[dict], level: str) -> list[str]:
    """Formatted messages captured by the log_records fixture at the given level."""
    return [r["message"] for r in records if r["level"].name == level]
