"""Composite element identifier codec and namespace values.

WHY: Every element lives in exactly one branch, so its full identity is
the tuple (org, project, branch, local id). Storage and cross-project
references carry this as one delimited string ("org:proj:branch:elem").
Parsing and validating it in one place keeps every other module free of
string splitting.

HOW: Namespace and ElementId are frozen dataclasses, so they compare by
value and can be dict keys. parse() splits on the configured delimiter
and checks segment count, emptiness, length and the allowed character
pattern. scope_equal() compares only the branch scope.

RULES:
- Exactly four segments: org, project, branch, local
- A segment may not be empty or longer than ID_MAX_LENGTH
- Every segment must fully match ID_PATTERN
- All functions are pure; nothing here touches global state
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from jmi_converter import config
from jmi_converter.core.errors import MalformedId

_SEGMENT_NAMES = ("org", "project", "branch", "local")


@dataclass(frozen=True)
class Namespace:
    """The branch scope a cross-project reference resolves in.

    RULES:
    - org, project, branch are all required and non-empty
    - Wire form is {"org": ..., "project": ..., "branch": ...}
    """

    org: str
    project: str
    branch: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Namespace:
        """Build a Namespace from its wire form; raises ValueError when incomplete."""
        values = []
        for key in ("org", "project", "branch"):
            value = data.get(key)
            if not isinstance(value, str) or not value:
                raise ValueError("namespace field '{}' is missing or empty".format(key))
            values.append(value)
        return cls(*values)

    def to_dict(self) -> dict[str, str]:
        return {"org": self.org, "project": self.project, "branch": self.branch}

    def same_project(self, other: Namespace) -> bool:
        return self.org == other.org and self.project == other.project


@dataclass(frozen=True)
class ElementId:
    """A parsed composite element identifier."""

    org: str
    project: str
    branch: str
    local: str

    @property
    def namespace(self) -> Namespace:
        return Namespace(self.org, self.project, self.branch)

    def belongs_to(self, namespace: Namespace) -> bool:
        """True when this id lives in the given branch scope."""
        return self.namespace == namespace

    def __str__(self) -> str:
        return create_id(self.org, self.project, self.branch, self.local)


def create_id(*parts: str) -> str:
    """Join id segments with the configured delimiter.

    Accepts either separate strings or a single list of strings.
    Raises MalformedId when any part is not a string.
    """
    if len(parts) == 1 and isinstance(parts[0], (list, tuple)):
        parts = tuple(parts[0])
    for part in parts:
        if not isinstance(part, str):
            raise MalformedId(parts, "every id segment must be a string")
    return config.ID_DELIMITER.join(parts)


def is_composite(raw: object) -> bool:
    """True when raw looks like a delimited composite id (not necessarily valid)."""
    return isinstance(raw, str) and config.ID_DELIMITER in raw


def parse(raw: object, max_length: Optional[int] = None) -> ElementId:
    """Parse a composite "org:project:branch:local" string into an ElementId.

    WHY: Composite ids arrive from storage and from cross-project
    references. A malformed one must be rejected before it can be used as
    a dict key, or two spellings of the "same" id could coexist.

    HOW: Split on ID_DELIMITER, then validate each segment in order so the
    error names the first segment that fails.

    RULES:
    - Non-strings and strings without exactly four segments are rejected
    - Empty, over-long (> max_length) or pattern-violating segments are rejected
    - max_length defaults to config.ID_MAX_LENGTH

    Args:
        raw: The candidate identifier.
        max_length: Optional override of the per-segment maximum length.

    Returns:
        The parsed ElementId.
    """
    if not isinstance(raw, str):
        raise MalformedId(raw, "id must be a string")

    limit = config.ID_MAX_LENGTH if max_length is None else max_length
    segments = raw.split(config.ID_DELIMITER)
    if len(segments) != len(_SEGMENT_NAMES):
        raise MalformedId(
            raw,
            "expected {} segments, found {}".format(len(_SEGMENT_NAMES), len(segments)),
        )

    pattern = re.compile(config.ID_PATTERN)
    for name, segment in zip(_SEGMENT_NAMES, segments):
        if not segment:
            raise MalformedId(raw, "{} segment is empty".format(name))
        if len(segment) > limit:
            raise MalformedId(
                raw, "{} segment exceeds {} characters".format(name, limit)
            )
        if not pattern.fullmatch(segment):
            raise MalformedId(raw, "{} segment has invalid characters".format(name))

    return ElementId(*segments)


def scope_equal(a: ElementId, b: ElementId) -> bool:
    """True if both ids share org, project and branch."""
    return a.namespace == b.namespace
