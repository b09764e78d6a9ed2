# src/pullup/middleware/__init__.py

"""Middleware components for the PullUp API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
