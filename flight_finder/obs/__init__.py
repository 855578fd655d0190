"""Observability helpers.

Request-scoped context, structured JSON logging, in-process metrics and the
ASGI middleware that ties them to each HTTP request.
"""

__all__ = [
    "middleware",
    "metrics",
    "logger",
    "context",
]
