"""Request logging middleware."""

import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request before it reaches the router.

    The prefix tells the two listeners' log lines apart.
    """

    def __init__(self, app, prefix: str, logger: logging.Logger = None):
        super().__init__(app)
        self.prefix = prefix
        self.logger = logger or logging.getLogger("linkhop.web")

    async def dispatch(self, request: Request, call_next: Callable):
        self.logger.info(f"{self.prefix}: {request.method} {request.url.path}")
        return await call_next(request)
