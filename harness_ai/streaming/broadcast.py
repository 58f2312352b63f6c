"""Fan-out of one produced sequence to any number of independent consumers."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Generic, List, Optional, TypeVar

T = TypeVar("T")


class PartBroadcaster(Generic[T]):
    """
    Append-only log with a read cursor per subscriber.

    The producer never waits for consumers: published items are kept until
    the broadcaster is dropped, so a subscriber that starts late still sees
    every item from the beginning, and a subscriber that never reads does not
    hold the producer back.
    """

    def __init__(self) -> None:
        self._items: List[T] = []
        self._closed = False
        self._error: Optional[BaseException] = None
        self._changed: Optional[asyncio.Condition] = None

    def _condition(self) -> asyncio.Condition:
        if self._changed is None:
            self._changed = asyncio.Condition()
        return self._changed

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def items(self) -> List[T]:
        return list(self._items)

    async def publish(self, item: T) -> None:
        if self._closed:
            raise RuntimeError("cannot publish to a closed broadcaster")
        self._items.append(item)
        changed = self._condition()
        async with changed:
            changed.notify_all()

    async def close(self, error: Optional[BaseException] = None) -> None:
        """End the sequence; subscribers drain remaining items, then stop (or raise ``error``)."""
        if self._closed:
            return
        self._closed = True
        self._error = error
        changed = self._condition()
        async with changed:
            changed.notify_all()

    async def subscribe(self) -> AsyncIterator[T]:
        """Iterate every item from the first one, waiting for new items until closed."""
        index = 0
        changed = self._condition()
        while True:
            if index < len(self._items):
                item = self._items[index]
                index += 1
                yield item
                continue
            if self._closed:
                if self._error is not None:
                    raise self._error
                return
            async with changed:
                await changed.wait_for(lambda: index < len(self._items) or self._closed)
