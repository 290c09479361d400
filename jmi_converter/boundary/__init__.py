"""Query boundary — the contract between the HTTP layer and the core.

WHY: The transport layer (routing, auth, sockets) lives elsewhere, but
the rules it must apply to element queries belong with the converter:
format token validation, id precedence, archived filtering, and the
mapping from typed errors to HTTP status codes.

HOW: models.py defines the pydantic query/response schemas, handler.py
applies the rules and calls the formatters.

RULES:
- No network code in this package
- Every response body is JSON text
"""

from jmi_converter.boundary.handler import handle_query, resolve_requested_ids
from jmi_converter.boundary.models import ElementQuery, ErrorResponse, QueryResult

__all__ = [
    "ElementQuery",
    "ErrorResponse",
    "QueryResult",
    "handle_query",
    "resolve_requested_ids",
]
