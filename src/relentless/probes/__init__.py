"""Ready-made operations for common polling tasks."""

from .http import http_probe

__all__ = ["http_probe"]
