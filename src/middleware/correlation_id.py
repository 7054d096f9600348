"""Correlation ID middleware for request tracing."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

import logfire


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add correlation IDs to requests.

    Webhook deliveries from the platform carry no request id of their own,
    so each one gets a generated id that ties together the route's logs and
    the background dispatch it schedules.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        """
        Initialize correlation ID middleware.

        Args:
            app: ASGI application
            header_name: HTTP header name for correlation ID
        """
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Reuse the caller's id when present, otherwise generate one
        correlation_id = request.headers.get(self.header_name.lower(), str(uuid.uuid4()))
        request.state.correlation_id = correlation_id

        with logfire.span(
            "{method} {path}",
            method=request.method,
            path=request.url.path,
            correlation_id=correlation_id,
        ):
            response = await call_next(request)

        response.headers[self.header_name] = correlation_id
        return response
