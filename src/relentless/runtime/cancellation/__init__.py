"""Termination-request watchers raced against the retry loop."""

from .hub import SignalHub, default_hub
from .watcher import DEFAULT_SIGNALS, SignalWatcher, TriggerWatcher, Watcher

__all__ = [
    "Watcher",
    "SignalWatcher",
    "TriggerWatcher",
    "DEFAULT_SIGNALS",
    "SignalHub",
    "default_hub",
]
