"""Pydantic request/response models for the element query boundary.

WHY: The HTTP layer hands the converter a loosely typed query: a format
token, a key field, and element ids that may arrive as a query list, a
string array body, or an array of element objects. Pydantic models give
that input one validated shape before any id precedence or conversion
logic runs, and give responses a fixed schema.

HOW: ElementQuery carries every option the element listing endpoint
accepts. Comma-separated id strings (as sent in a query string) are
split by a field validator. QueryResult and ErrorResponse describe what
the boundary returns to the transport layer.

RULES:
- All models use Field(description=...) for schema documentation
- format stays a plain string here; the handler rejects unknown tokens
  with UnsupportedFormat so every format error has the same status
- body may hold strings or objects; precedence is decided by the handler
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from jmi_converter import config


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class ElementQuery(BaseModel):
    """Options of one element listing request.

    RULES:
    - format defaults to "jmi1"
    - key_field defaults to config.DEFAULT_KEY_FIELD
    - ids accepts a list or one comma-separated string
    - archived elements are dropped unless include_archived is true
    """

    format: str = Field(
        default="jmi1",
        description="Requested representation: 'jmi1', 'jmi2' or 'jmi3'.",
    )
    key_field: str = Field(
        default=config.DEFAULT_KEY_FIELD,
        description="Element field used as map key in JMI2/JMI3 output.",
    )
    ids: Optional[List[str]] = Field(
        default=None,
        description="Explicit element ids (query option). Highest precedence.",
    )
    body: Optional[List[Union[str, Dict[str, Any]]]] = Field(
        default=None,
        description="Request body: an array of id strings or of element objects.",
    )
    include_archived: bool = Field(
        default=False,
        description="Include archived elements in the result.",
    )
    minified: bool = Field(
        default=False,
        description="Return compact JSON instead of indented JSON.",
    )
    validate_hierarchy: bool = Field(
        default=False,
        description="Reject the result if the parent relation has a cycle or a second null-parent root.",
    )

    @field_validator("ids", mode="before")
    @classmethod
    def _split_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class QueryResult(BaseModel):
    """What the boundary hands back to the transport layer."""

    status_code: int = Field(description="HTTP status code to send.")
    content: str = Field(description="Serialized response body.")
    media_type: str = Field(
        default="application/json",
        description="MIME type of the content.",
    )


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is the error message
    - status repeats the HTTP status code for clients that only see the body
    """

    detail: str = Field(description="Error description.")
    status: int = Field(description="HTTP status code.")
