"""Typed error taxonomy for identifier parsing, indexing and conversion.

WHY: The query boundary has to turn every failure into an HTTP status
class without string matching: malformed input is a client error,
an invariant violation in stored data is a server error. Each condition
therefore gets its own exception class carrying structured attributes
instead of user-facing prose.

HOW: All errors derive from JMIError, which holds a short message and
the status code class. DataFormatError (400) groups everything caused by
the caller's input; InternalInvariantError (500) groups violations of
the model invariants; NotFoundError (404) is raised only by the
boundary when a query matches nothing.

RULES:
- Never repair ambiguous input: raise and let the caller decide
- Every subclass keeps the offending value(s) as attributes
- status_code is a class attribute; instances never override it
"""

from __future__ import annotations

from typing import Sequence


class JMIError(Exception):
    """Base class for every error raised by jmi_converter."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DataFormatError(JMIError):
    """The caller supplied data that cannot be processed as given."""

    status_code = 400


class NotFoundError(JMIError):
    """A query resolved to an empty working set."""

    status_code = 404


class InternalInvariantError(JMIError):
    """Stored data violates a model invariant (for example a parent cycle)."""

    status_code = 500


class MalformedId(DataFormatError):
    """Raised when an identifier string fails structural parsing.

    RULES:
    - raw is the original input (may be a non-string)
    - reason says which structural rule failed
    """

    def __init__(self, raw: object, reason: str) -> None:
        self.raw = raw
        self.reason = reason
        super().__init__("Malformed id {!r}: {}".format(raw, reason))


class DuplicateId(DataFormatError):
    """Raised when two records in one working set share an id."""

    def __init__(self, element_id: str) -> None:
        self.id = element_id
        super().__init__("Duplicate element id [{}] in working set.".format(element_id))


class NonUniqueKey(DataFormatError):
    """Raised when the chosen conversion key repeats across the working set."""

    def __init__(self, value: object, key_field: str = "id") -> None:
        self.value = value
        self.key_field = key_field
        super().__init__(
            "Key field '{}' is not unique: value [{}] repeats.".format(key_field, value)
        )


class UnsupportedFormat(DataFormatError):
    """Raised for an unknown JMI level/token or a data shape that does not match it."""

    def __init__(self, name: str, reason: str = "") -> None:
        self.name = name
        self.reason = reason
        message = "Unsupported format '{}'.".format(name)
        if reason:
            message = "{} {}".format(message, reason)
        super().__init__(message)


class InvalidElement(DataFormatError):
    """Raised when a record fails validation at the system boundary.

    RULES:
    - element_id is None when the record has no usable id at all
    """

    def __init__(self, element_id: object, reason: str) -> None:
        self.element_id = element_id
        self.reason = reason
        super().__init__("Invalid element [{}]: {}".format(element_id, reason))


class CycleDetected(InternalInvariantError):
    """Raised when the parent relation of a working set contains a cycle.

    RULES:
    - ids lists the elements on the cycle in parent-walk order
    """

    def __init__(self, ids: Sequence[str]) -> None:
        self.ids = list(ids)
        super().__init__(
            "A circular parent reference exists: {}.".format(" -> ".join(self.ids))
        )


class MultipleRoots(InternalInvariantError):
    """Raised when an element other than the canonical root has a null parent.

    RULES:
    - ids lists the offending elements in input order
    """

    def __init__(self, ids: Sequence[str], root_id: str) -> None:
        self.ids = list(ids)
        self.root_id = root_id
        super().__init__(
            "Only '{}' may have a null parent: {}.".format(root_id, ", ".join(self.ids))
        )
