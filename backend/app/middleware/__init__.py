"""
Chirp Backend — Middleware Package
===================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → GraphQL router

    Request ID runs first so the access log line and every log record
    emitted while resolving the operation share the same id.
"""
