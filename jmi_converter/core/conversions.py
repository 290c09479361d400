"""JMI conversion: flat list (JMI1), keyed map (JMI2) and nested tree (JMI3).

WHY: Clients consume element collections in three shapes. A flat list
is the wire format as stored; a keyed map gives O(1) lookup; a nested
tree mirrors the model browser. All three must carry the same records,
preserve every source/target pointer, and stay linear in the size of
the working set, which reaches tens of thousands of elements for large
models.

HOW: convert() normalizes both levels through config.format_level().
Every path into JMI2 or JMI3 builds a HierarchyIndex first (so
DuplicateId surfaces before any key check). JMI2 is one pass over the
index. JMI3 wraps each record in a new ElementNode, wires child lists
from ``children_of`` in one pass, and keys the working-set roots.
Flattening (2→1, 3→1) returns records in id-ascending order because the
original flat order cannot be recovered from a map or a tree.

RULES:
- 1→1, 2→2, 3→3 are identity copies of the container
- JMI2/JMI3 keys are str(record[key_field]); repeats raise NonUniqueKey
- JMI3 leaves carry an empty ``contains`` list, never None
- JMI3 siblings keep the JMI1 order filtered to their parent
- Records are never mutated; JMI3 nodes are new objects
- No recursion over model depth anywhere (explicit stacks)
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from jmi_converter import config
from jmi_converter.core.element import Element, load_elements
from jmi_converter.core.errors import InvalidElement, NonUniqueKey, UnsupportedFormat
from jmi_converter.core.hierarchy import HierarchyIndex
from jmi_converter.core.ids import Namespace

logger = logging.getLogger(__name__)


@dataclass
class ElementNode:
    """One element of a JMI3 tree: the record plus its nested children.

    WHY: JMI3 replaces each record's list of child ids with the child
    records themselves. Wrapping instead of rewriting ``contains`` keeps
    the caller's records untouched, so converting twice gives the same
    result.

    RULES:
    - element: the original record (its own ``contains`` stamp is ignored)
    - contains: nested child nodes in JMI1 order, [] for a leaf
    """

    element: Element
    contains: List[ElementNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.element.id

    def size(self) -> int:
        """Number of nodes in this subtree, including this one."""
        total = 0
        stack = [self]
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.contains)
        return total

    def to_dict(self) -> dict[str, Any]:
        """Wire form: the element dict with ``contains`` holding nested dicts."""
        root = self.element.to_dict()
        root["contains"] = []
        stack = [(self, root)]
        while stack:
            node, data = stack.pop()
            for child in node.contains:
                child_data = child.element.to_dict()
                child_data["contains"] = []
                data["contains"].append(child_data)
                stack.append((child, child_data))
        return root


JMI1 = List[Element]
JMI2 = Dict[str, Element]
JMI3 = Dict[str, ElementNode]
Representation = Union[JMI1, JMI2, JMI3]


def convert(
    from_level: Union[int, str],
    to_level: Union[int, str],
    data: Any,
    key_field: str = config.DEFAULT_KEY_FIELD,
) -> Representation:
    """Convert a working set between JMI representation levels.

    WHY: The query layer asks for "jmi1", "jmi2" or "jmi3"; export tools
    may also need to turn a map or tree back into a flat list. One entry
    point keeps the level checks and error behavior identical for all
    directions.

    HOW: Same-level requests return a shallow copy after a shape check.
    Otherwise the input is flattened to JMI1 first (a no-op for JMI1
    input), then indexed and re-expressed at the target level.

    RULES:
    - Unknown levels raise UnsupportedFormat(name)
    - Data not shaped like the declared source level raises UnsupportedFormat
    - DuplicateId propagates from the index, before any key check
    - NonUniqueKey for repeated key values; InvalidElement when a record
      has no value for key_field
    - JMI3 raises CycleDetected rather than dropping elements on a cycle

    Args:
        from_level: Source level (1, 2, 3 or "jmi1".."jmi3").
        to_level: Target level (1, 2, 3 or "jmi1".."jmi3").
        data: The representation to convert.
        key_field: Record field whose value keys JMI2/JMI3 entries.

    Returns:
        A list (JMI1), a dict of records (JMI2) or a dict of root nodes (JMI3).
    """
    source = config.format_level(from_level)
    target = config.format_level(to_level)

    if source == target:
        return _copy(source, data)

    elements = _flatten(source, data)
    if target == 1:
        result: Representation = elements
    elif target == 2:
        result = _jmi12(elements, key_field)
    else:
        result = _jmi13(elements, key_field)

    logger.debug(
        "Converted %d elements from JMI%d to JMI%d (key=%s)",
        len(elements), source, target, key_field,
    )
    return result


def _copy(level: int, data: Any) -> Representation:
    if level == 1:
        return _require_flat(data)
    if level == 2:
        return dict(_require_map(data, Element, 2))
    return dict(_require_map(data, ElementNode, 3))


def _require_flat(data: Any) -> JMI1:
    if isinstance(data, (Mapping, str, bytes)) or not isinstance(data, Sequence):
        raise UnsupportedFormat("jmi1", "Data is not a flat list of elements.")
    for item in data:
        if not isinstance(item, Element):
            raise UnsupportedFormat("jmi1", "Data holds non-Element items.")
    return list(data)


def _require_map(data: Any, value_type: type, level: int) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise UnsupportedFormat("jmi{}".format(level), "Data is not a keyed map.")
    for value in data.values():
        if not isinstance(value, value_type):
            raise UnsupportedFormat(
                "jmi{}".format(level),
                "Map values must be {} instances.".format(value_type.__name__),
            )
    return data


def _flatten(level: int, data: Any) -> JMI1:
    """Turn any representation into a JMI1 list."""
    if level == 1:
        return _require_flat(data)
    if level == 2:
        records = _require_map(data, Element, 2)
        return sorted(records.values(), key=lambda e: e.id)

    roots = _require_map(data, ElementNode, 3)
    flat: JMI1 = []
    stack = sorted(roots.values(), key=lambda n: n.id, reverse=True)
    while stack:
        node = stack.pop()
        children = sorted(node.contains, key=lambda n: n.id)
        flat.append(dataclasses.replace(node.element, contains=[c.id for c in children]))
        stack.extend(reversed(children))
    return flat


def _keys(index: HierarchyIndex, key_field: str) -> Dict[str, str]:
    """Map each element id to its string key, enforcing uniqueness."""
    keys: Dict[str, str] = {}
    seen = set()
    for element_id in index.order:
        value = index.by_id[element_id].get(key_field)
        if value is None:
            raise InvalidElement(element_id, "no value for key field '{}'".format(key_field))
        key = str(value)
        if key in seen:
            raise NonUniqueKey(value, key_field)
        seen.add(key)
        keys[element_id] = key
    return keys


def _jmi12(elements: JMI1, key_field: str) -> JMI2:
    index = HierarchyIndex(elements)
    if key_field == "id":
        return dict(index.by_id)
    keys = _keys(index, key_field)
    return {keys[i]: index.by_id[i] for i in index.order}


def _jmi13(elements: JMI1, key_field: str) -> JMI3:
    index = HierarchyIndex(elements)
    keys = _keys(index, key_field)
    if logger.isEnabledFor(logging.DEBUG):
        index.stale_contains()

    nodes = {i: ElementNode(index.by_id[i]) for i in index.order}
    for element_id in index.order:
        nodes[element_id].contains = [nodes[c] for c in index.children_of[element_id]]

    roots = index.roots()
    placed = sum(nodes[r].size() for r in roots)
    if placed != len(index):
        # Only a parent cycle can leave elements unreachable from every root.
        index.validate_acyclic()

    orphans = index.orphans()
    if orphans:
        logger.debug("Promoted %d elements with absent parents to roots", len(orphans))
    return {keys[r]: nodes[r] for r in roots}


def count_nodes(tree: JMI3) -> int:
    """Total number of elements across all nesting levels of a JMI3 tree."""
    return sum(node.size() for node in tree.values())


def to_jsonable(level: Union[int, str], representation: Representation) -> Any:
    """Turn a representation into plain lists/dicts ready for json.dumps."""
    level = config.format_level(level)
    if level == 1:
        return [e.to_dict() for e in _require_flat(representation)]
    if level == 2:
        return {k: e.to_dict() for k, e in _require_map(representation, Element, 2).items()}
    return {k: n.to_dict() for k, n in _require_map(representation, ElementNode, 3).items()}


def load_representation(
    level: Union[int, str],
    raw: Any,
    scope: Optional[Namespace] = None,
) -> Representation:
    """Parse JSON-decoded JMI data back into records (JMI1/2) or nodes (JMI3).

    RULES:
    - Each record is validated with Element.from_dict()
    - JMI3 ``contains`` entries must be nested objects; they become child
      nodes and the loaded record's own ``contains`` is left empty
    """
    level = config.format_level(level)
    name = "jmi{}".format(level)
    if level == 1:
        if not isinstance(raw, list):
            raise UnsupportedFormat(name, "Data is not a flat list of elements.")
        return load_elements(raw, scope)
    if not isinstance(raw, Mapping):
        raise UnsupportedFormat(name, "Data is not a keyed map.")
    if level == 2:
        return {key: Element.from_dict(value, scope) for key, value in raw.items()}

    tree: JMI3 = {}
    stack = []
    for key, value in raw.items():
        node = _load_node(value, scope)
        tree[key] = node
        stack.append((node, value))
    while stack:
        node, value = stack.pop()
        for child_value in value.get("contains") or []:
            if not isinstance(child_value, Mapping):
                raise UnsupportedFormat(name, "Nested 'contains' must hold element objects.")
            child = _load_node(child_value, scope)
            node.contains.append(child)
            stack.append((child, child_value))
    return tree


def _load_node(value: Any, scope: Optional[Namespace]) -> ElementNode:
    if not isinstance(value, Mapping):
        raise UnsupportedFormat("jmi3", "Tree entries must be element objects.")
    record = {k: v for k, v in value.items() if k != "contains"}
    return ElementNode(Element.from_dict(record, scope))
