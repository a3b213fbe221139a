"""Error types raised by the retry engine.

- ErrorCode: Codes attached to engine-raised errors
- RetryError: Base class for engine-raised errors
- RetriesExhausted / CancellationRequested: The two engine outcomes
"""

from .errors import CancellationRequested, ErrorCode, RetriesExhausted, RetryError

__all__ = ["ErrorCode", "RetryError", "RetriesExhausted", "CancellationRequested"]
