"""Middleware for the linkhop listeners."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
