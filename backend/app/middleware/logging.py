"""
Chirp Backend — Request Logging Middleware
===========================================

What:  One access-log line per HTTP request.
How:   GraphQL answers resolver errors with 200, so a non-2xx status here
       means the transport itself failed (malformed JSON, bad method, a
       crash before Strawberry ran). Only those raise the level.
       Per-operation detail comes from OperationLoggingExtension.

GraphQL specifics:
    - POST to the GraphQL path logs the document size instead of the body;
      passwords travel in signup/login variables.
    - GET to the GraphQL path is the GraphiQL page and logs at DEBUG.
    - /health is not logged at all.

The Authorization header is never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("chirp.access")

QUIET_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, graphql_path: str = "/graphql"):
        super().__init__(app)
        self.graphql_path = graphql_path

    def _level(self, request: Request, status: int) -> int:
        if status >= 500:
            return logging.ERROR
        if status >= 400:
            return logging.WARNING
        if request.method == "GET" and request.url.path == self.graphql_path:
            return logging.DEBUG
        return logging.INFO

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        detail = ""
        if request.method == "POST" and request.url.path == self.graphql_path:
            detail = f" document={request.headers.get('content-length', '?')}B"

        logger.log(
            self._level(request, response.status_code),
            "%s %s %d %.1fms%s [%s]",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            detail,
            request_id_var.get(""),
        )
        return response
