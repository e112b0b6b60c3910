"""
Chirp Backend — GraphQL Schema Extensions
==========================================

What:  Operation-level logging and the error-masking policy.
Why:   The HTTP access log sees every GraphQL call as `POST /graphql 200`;
       this adds the operation name, duration and error count.
"""

import logging
import time

from graphql import GraphQLError
from strawberry.extensions import SchemaExtension

from app.exceptions import ChirpError
from app.middleware.request_id import request_id_var

logger = logging.getLogger("chirp.graphql")


class OperationLoggingExtension(SchemaExtension):
    """Logs one line per executed GraphQL operation."""

    def on_operation(self):
        start_time = time.perf_counter()
        yield
        duration_ms = (time.perf_counter() - start_time) * 1000

        context = self.execution_context
        result = getattr(context, "result", None)
        error_count = len(result.errors or []) if result is not None else 0
        operation = context.operation_name or "anonymous"

        logger.log(
            logging.WARNING if error_count else logging.INFO,
            "operation %s %.1fms errors=%d [%s]",
            operation,
            duration_ms,
            error_count,
            request_id_var.get(""),
            extra={
                "operation": operation,
                "duration_ms": round(duration_ms, 2),
                "error_count": error_count,
            },
        )


def should_mask_error(error: GraphQLError) -> bool:
    """
    Hide everything that is not an application error.

    Syntax/validation errors have no original_error and are shown as-is;
    ChirpErrors carry client-safe messages. Anything else (a driver error,
    a bug) is replaced by a generic message.
    """
    original = error.original_error
    if original is None:
        return False
    return not isinstance(original, ChirpError)
