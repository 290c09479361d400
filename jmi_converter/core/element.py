"""Element record: the validated in-memory form of one model element.

WHY: Elements arrive from the persistence layer as open-ended JSON
objects. Reading fields ad hoc from dicts spreads validation across the
converter and lets malformed records slip into the tree. One explicit
record type, validated once at the boundary, gives the index and the
converter a fixed shape to rely on.

HOW: Element is a dataclass with the fields the core interprets (id,
parent, contains, source/target and their namespaces, scope) plus the
display/audit fields it passes through. Everything else lands in the
opaque ``payload`` dict and is written back unchanged by to_dict().
Element.from_dict() is the boundary validator.

RULES:
- id and parent are required on the wire; parent is None only for roots
- Composite ids ("org:proj:branch:elem") are split; the local id is kept
  and the scope is recorded, which must agree with any org/project/branch
  fields sent alongside
- A composite parent must be in the same branch scope as its child
- contains is accepted but never trusted; the hierarchy index recomputes it
  and stale entries (even ones naming another branch) never reject a record
- source and target are a pair: both set or both absent
- A namespace is only valid for a pointer that leaves the element's branch
  scope; pointers into the same scope are stored as plain local ids
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional

from jmi_converter.core import ids
from jmi_converter.core.errors import InvalidElement, MalformedId
from jmi_converter.core.ids import Namespace

# Wire keys the record interprets; everything else goes to payload.
_SCOPE_KEYS = ("org", "project", "branch")
_CORE_KEYS = frozenset({
    "id", "name", "parent", "type", "contains",
    "source", "target", "sourceNamespace", "targetNamespace",
    "documentation", "custom", "archived",
})


@dataclass
class Element:
    """One element of a branch's model tree.

    RULES:
    - id: local id, unique within the branch
    - parent: local id of the parent, or None for a root
    - contains: child ids as stamped by the sender (untrusted cache)
    - source/target: local ids of the pointees; *_namespace set when the
      pointee lives in another branch scope
    - scope: the element's own {org, project, branch}, when known
    - payload: every other wire field, passed through untouched
    """

    id: str
    parent: Optional[str]
    name: str = ""
    type: str = ""
    contains: List[str] = field(default_factory=list)
    source: Optional[str] = None
    target: Optional[str] = None
    source_namespace: Optional[Namespace] = None
    target_namespace: Optional[Namespace] = None
    documentation: str = ""
    custom: dict = field(default_factory=dict)
    archived: bool = False
    scope: Optional[Namespace] = None
    payload: dict = field(default_factory=dict)

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def element_id(self) -> Optional[ids.ElementId]:
        """The composite identifier, when the element's scope is known."""
        if self.scope is None:
            return None
        return ids.ElementId(self.scope.org, self.scope.project, self.scope.branch, self.id)

    def get(self, field_name: str) -> Any:
        """Return a field by its wire name (core, scope, or payload field)."""
        if field_name in _SCOPE_KEYS:
            return getattr(self.scope, field_name) if self.scope else self.payload.get(field_name)
        if field_name == "sourceNamespace":
            return self.source_namespace.to_dict() if self.source_namespace else None
        if field_name == "targetNamespace":
            return self.target_namespace.to_dict() if self.target_namespace else None
        if field_name in _CORE_KEYS:
            return getattr(self, field_name)
        return self.payload.get(field_name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire form (a new dict; the record is not touched)."""
        data: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.scope is not None:
            data.update(self.scope.to_dict())
        data["parent"] = self.parent
        if self.source is not None:
            data["source"] = self.source
            if self.source_namespace is not None:
                data["sourceNamespace"] = self.source_namespace.to_dict()
            data["target"] = self.target
            if self.target_namespace is not None:
                data["targetNamespace"] = self.target_namespace.to_dict()
        data["type"] = self.type
        data["documentation"] = self.documentation
        data["custom"] = dict(self.custom)
        data["archived"] = self.archived
        data["contains"] = list(self.contains)
        for key, value in self.payload.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], scope: Optional[Namespace] = None) -> Element:
        """Validate a wire record and build an Element.

        WHY: This is the single point where untyped input becomes a
        trusted record. Everything downstream assumes its rules hold.

        HOW: Resolve the element's scope first (composite id, explicit
        org/project/branch fields, or the working-set scope passed in),
        then normalize parent, contains and the source/target pair
        relative to that scope. Remaining keys become the payload.

        RULES:
        - Raises InvalidElement for structural problems
        - Raises MalformedId for composite ids that do not parse

        Args:
            data: One JSON-decoded element object.
            scope: Branch scope of the working set, used when the record
                carries neither a composite id nor scope fields.

        Returns:
            The validated Element.
        """
        if not isinstance(data, Mapping):
            raise InvalidElement(None, "record must be an object")

        raw_id = data.get("id")
        if not isinstance(raw_id, str) or not raw_id:
            raise InvalidElement(raw_id, "'id' is required and must be a non-empty string")

        explicit_scope = _scope_fields(data)
        element_scope = explicit_scope or scope
        local_id = raw_id
        if ids.is_composite(raw_id):
            parsed = ids.parse(raw_id)
            if element_scope is not None and parsed.namespace != element_scope:
                raise InvalidElement(raw_id, "composite id disagrees with the element's scope")
            element_scope = parsed.namespace
            local_id = parsed.local

        if "parent" not in data:
            raise InvalidElement(local_id, "'parent' is required")
        parent = _same_scope_ref(data["parent"], local_id, element_scope, "parent")

        raw_contains = data.get("contains", [])
        if raw_contains is None:
            raw_contains = []
        if not isinstance(raw_contains, list):
            raise InvalidElement(local_id, "'contains' must be a list of ids")
        contains = [_stamped_child(child, local_id) for child in raw_contains]

        source, source_ns = _pointer(data, "source", local_id, element_scope)
        target, target_ns = _pointer(data, "target", local_id, element_scope)
        if (source is None) != (target is None):
            raise InvalidElement(local_id, "'source' and 'target' must be set together")

        custom = data.get("custom") or {}
        if not isinstance(custom, Mapping):
            raise InvalidElement(local_id, "'custom' must be an object")
        archived = data.get("archived") or False
        if not isinstance(archived, bool):
            raise InvalidElement(local_id, "'archived' must be a boolean")

        consumed = set(_CORE_KEYS)
        if explicit_scope is not None:
            consumed.update(_SCOPE_KEYS)
        payload = {k: v for k, v in data.items() if k not in consumed}

        return cls(
            id=local_id,
            parent=parent,
            name=_text(data, "name", local_id),
            type=_text(data, "type", local_id),
            contains=contains,
            source=source,
            target=target,
            source_namespace=source_ns,
            target_namespace=target_ns,
            documentation=_text(data, "documentation", local_id),
            custom=dict(custom),
            archived=archived,
            scope=element_scope,
            payload=payload,
        )


def _text(data: Mapping[str, Any], key: str, element_id: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidElement(element_id, "'{}' must be a string".format(key))
    return value


def _scope_fields(data: Mapping[str, Any]) -> Optional[Namespace]:
    """Namespace from explicit org/project/branch fields, if all three are sent."""
    if not all(isinstance(data.get(k), str) and data.get(k) for k in _SCOPE_KEYS):
        return None
    return Namespace(data["org"], data["project"], data["branch"])


def _stamped_child(raw: Any, element_id: str) -> str:
    """Local id of one stamped ``contains`` entry.

    The stamp is an untrusted cache, so a composite entry pointing at
    another branch is reduced to its local id instead of being rejected.
    """
    if not isinstance(raw, str) or not raw:
        raise InvalidElement(element_id, "'contains' must hold non-empty string ids")
    if ids.is_composite(raw):
        try:
            return ids.parse(raw).local
        except MalformedId:
            return raw
    return raw


def _same_scope_ref(
    raw: Any,
    element_id: str,
    scope: Optional[Namespace],
    field_name: str,
) -> Optional[str]:
    """Normalize a parent reference to a local id in the same scope."""
    if raw is None and field_name == "parent":
        return None
    if not isinstance(raw, str) or not raw:
        raise InvalidElement(
            element_id, "'{}' must hold non-empty string ids".format(field_name)
        )
    if not ids.is_composite(raw):
        return raw
    parsed = ids.parse(raw)
    if scope is not None and parsed.namespace != scope:
        raise InvalidElement(
            element_id, "'{}' points outside the element's branch".format(field_name)
        )
    return parsed.local


def _pointer(
    data: Mapping[str, Any],
    key: str,
    element_id: str,
    scope: Optional[Namespace],
) -> tuple[Optional[str], Optional[Namespace]]:
    """Normalize a source/target pointer and its namespace."""
    raw = data.get(key)
    raw_ns = data.get(key + "Namespace")
    if raw is None:
        if raw_ns is not None:
            raise InvalidElement(element_id, "'{}Namespace' set without '{}'".format(key, key))
        return None, None
    if not isinstance(raw, str) or not raw:
        raise InvalidElement(element_id, "'{}' must be a non-empty string".format(key))

    namespace: Optional[Namespace] = None
    if raw_ns is not None:
        if not isinstance(raw_ns, Mapping):
            raise InvalidElement(element_id, "'{}Namespace' must be an object".format(key))
        try:
            namespace = Namespace.from_dict(raw_ns)
        except ValueError as exc:
            raise InvalidElement(element_id, "'{}Namespace': {}".format(key, exc)) from exc

    local = raw
    if ids.is_composite(raw):
        parsed = ids.parse(raw)
        if namespace is not None and parsed.namespace != namespace:
            raise InvalidElement(
                element_id, "'{}' disagrees with '{}Namespace'".format(key, key)
            )
        namespace = parsed.namespace
        local = parsed.local

    if namespace is not None and scope is not None and namespace == scope:
        if raw_ns is not None:
            raise InvalidElement(
                element_id,
                "'{}Namespace' names the element's own branch".format(key),
            )
        namespace = None
    return local, namespace


def load_elements(
    records: Iterable[Mapping[str, Any]],
    scope: Optional[Namespace] = None,
) -> list[Element]:
    """Validate a sequence of wire records into Elements, preserving order."""
    return [Element.from_dict(record, scope) for record in records]


def exclude_archived(elements: Iterable[Element], include_archived: bool = False) -> list[Element]:
    """Drop archived elements unless include_archived is set."""
    if include_archived:
        return list(elements)
    return [e for e in elements if not e.archived]
