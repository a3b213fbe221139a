"""Concurrency primitives used by the retry engine.

Key Components:
    - OnceSlot: Single-slot, first-write-wins result holder
    - run_sync: Drive a coroutine from synchronous code
    - to_daemon_thread: Await a blocking call without pinning the loop
    - post_to_loop: Thread-safe scheduling that tolerates closed loops
"""

from __future__ import annotations

from .interop import post_to_loop, run_sync, to_daemon_thread
from .slot import OnceSlot, settle

__all__ = [
    "OnceSlot",
    "settle",
    "run_sync",
    "to_daemon_thread",
    "post_to_loop",
]
