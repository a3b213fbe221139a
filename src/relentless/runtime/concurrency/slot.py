"""Single-slot, first-write-wins result holder.

Several concurrent producers may offer a value; only the first is kept and
later offers are dropped. One consumer awaits the kept value.

Example:
    >>> slot: OnceSlot[str] = OnceSlot()
    >>> slot.offer("first")
    True
    >>> slot.offer("second")
    False
    >>> await slot.get()
    'first'
"""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

T = TypeVar("T")


def settle(future: asyncio.Future[T], value: T) -> bool:
    """Resolve future unless it is already done. Returns True if this call resolved it."""
    if future.done():
        return False
    future.set_result(value)
    return True


class OnceSlot(Generic[T]):
    """One-shot slot backed by an asyncio Future.

    Must be created and written from the event loop thread. Use
    ``post_to_loop`` to offer from other threads.
    """

    __slots__ = ("_future",)

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._future: asyncio.Future[T] = (loop or asyncio.get_running_loop()).create_future()

    @property
    def filled(self) -> bool:
        return self._future.done()

    def offer(self, value: T) -> bool:
        """Store value if the slot is empty. Returns False when another writer got there first."""
        return settle(self._future, value)

    async def get(self) -> T:
        """Wait for the first offered value."""
        return await self._future
