"""Element query handler: id precedence, working-set loading, error→status.

WHY: Between the HTTP layer and the core sits a small amount of policy
that must be applied the same way for every request: which of the
three ways of naming elements wins, which records count as the working
set, and which HTTP status each typed error becomes. Keeping it out of
the transport means it can be tested without a server.

HOW: resolve_requested_ids() applies the single precedence contract.
handle_query() calls the persistence collaborator through a plain
callable, validates the records, filters archived ones, runs the
formatter for the requested token, and converts any JMIError into an
ErrorResponse body with the error's status code.

RULES:
- Precedence: explicit ids > string array body > object array body
- An unknown format token is rejected before fetching (400)
- An empty working set after filtering is a 404
- validate_hierarchy checks for parent cycles and extra null-parent roots
- 4xx errors are logged at warning level, 5xx at error level
- JMIError never escapes handle_query(); other exceptions do
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from jmi_converter.boundary.models import ElementQuery, ErrorResponse, QueryResult
from jmi_converter.core.element import exclude_archived, load_elements
from jmi_converter.core.errors import JMIError, NotFoundError, UnsupportedFormat
from jmi_converter.core.hierarchy import HierarchyIndex
from jmi_converter.core.ids import Namespace
from jmi_converter.formatters import FORMATTERS
from jmi_converter.formatters.jmi import dump_json

logger = logging.getLogger(__name__)

FetchElements = Callable[[Optional[List[str]]], List[Mapping[str, Any]]]
"""Persistence collaborator: ids (None = all) → raw element records."""


def resolve_requested_ids(query: ElementQuery) -> Optional[List[str]]:
    """Decide which element ids a query names.

    WHY: Clients can name elements three ways at once. Guessing per
    request led to inconsistent results, so there is exactly one order.

    RULES:
    - query.ids wins whenever it is given (even if empty)
    - else a body of only strings is the id list
    - else a body of only objects contributes their "id" values
    - else None (no restriction: the whole branch)
    """
    if query.ids is not None:
        return list(query.ids)
    body = query.body
    if body:
        if all(isinstance(item, str) for item in body):
            return list(body)
        if all(isinstance(item, dict) for item in body):
            return [item.get("id") for item in body if isinstance(item.get("id"), str)]
    return None


def error_result(error: JMIError) -> QueryResult:
    """Build the response for a typed error and log it."""
    if error.status_code >= 500:
        logger.error("Element query failed: %s", error.message)
    else:
        logger.warning("Rejected element query: %s", error.message)
    body = ErrorResponse(detail=error.message, status=error.status_code)
    return QueryResult(
        status_code=error.status_code,
        content=dump_json(body.model_dump()),
    )


def handle_query(
    query: ElementQuery,
    fetch: FetchElements,
    scope: Optional[Namespace] = None,
) -> QueryResult:
    """Run one element listing query end to end.

    Args:
        query: Validated query options.
        fetch: Persistence collaborator returning raw records for ids.
        scope: Branch scope of the request (org/project/branch route
            parameters), applied to records that carry none.

    Returns:
        A QueryResult with status 200 and the serialized representation,
        or the error status and an ErrorResponse body.
    """
    try:
        formatter_cls = FORMATTERS.get(query.format)
        if formatter_cls is None:
            raise UnsupportedFormat(query.format, "Valid formats: {}.".format(
                ", ".join(sorted(FORMATTERS))
            ))

        requested = resolve_requested_ids(query)
        records = fetch(requested)
        elements = exclude_archived(load_elements(records, scope), query.include_archived)
        if not elements:
            raise NotFoundError("No elements found.")

        if query.validate_hierarchy:
            index = HierarchyIndex(elements)
            index.validate_acyclic()
            index.validate_single_root()

        output = formatter_cls().format(elements, query.key_field, query.minified)
    except JMIError as exc:
        return error_result(exc)

    logger.info(
        "Served %d elements as %s", len(elements), query.format,
    )
    return QueryResult(
        status_code=200,
        content=output.content,
        media_type=output.media_type,
    )


def query_from_options(options: Dict[str, Any], body: Any = None) -> ElementQuery:
    """Build an ElementQuery from raw query-string options and a request body.

    Boolean options arrive as "true"/"false" strings; pydantic converts them.
    A body that is not a list is ignored.
    """
    data = dict(options)
    if isinstance(body, list):
        data["body"] = body
    return ElementQuery.model_validate(data)
