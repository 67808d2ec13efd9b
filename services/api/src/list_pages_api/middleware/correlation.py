"""Correlation ID middleware for request tracing."""

import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from list_pages_shared.logging import bind_context, set_correlation_id, unbind_context

CORRELATION_ID_HEADER = "X-Correlation-ID"


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reads or generates a correlation ID and binds it to the request's logs.

    The ID is stored on ``request.state`` for exception handlers and echoed
    back in the response header.
    """

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = CORRELATION_ID_HEADER,
        generator: Callable[[], str] = generate_correlation_id,
    ):
        super().__init__(app)
        self.header_name = header_name
        self.generator = generator

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        correlation_id = request.headers.get(self.header_name) or self.generator()
        request.state.correlation_id = correlation_id

        set_correlation_id(correlation_id)
        bind_context(correlation_id=correlation_id)
        try:
            response = await call_next(request)
            response.headers[self.header_name] = correlation_id
            return response
        finally:
            set_correlation_id(None)
            unbind_context("correlation_id")


def get_request_correlation_id(request: Request) -> str | None:
    """Correlation ID of a request, if the middleware assigned one."""
    return getattr(request.state, "correlation_id", None)
