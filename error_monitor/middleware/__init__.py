"""HTTP middleware."""

from error_monitor.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
