"""HTTP middleware for StreamWaves"""

from streamwaves.middleware.request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
