"""Hierarchy index: id lookup and parent→children adjacency for a working set.

WHY: Callers rarely hand over a whole branch. Filters, pagination and
explicit id lists produce a working set that may miss parents, and the
``contains`` field stamped on each record may already be stale. The
converter needs a lookup table and a child adjacency map that are
computed from the working set alone and are deterministic for any
subset.

HOW: One pass over the input fills ``by_id`` (rejecting duplicates) and
records input order. A second pass appends each element to its parent's
child list, or to the root list when the parent is null or missing from
the working set. Tree walks (depth-first order, subtree, cycle check)
use explicit stacks so model depth never hits the recursion limit.

RULES:
- children_of is derived from ``parent`` only, never from ``contains``
- Every indexed id has a children_of entry, possibly empty
- Child lists and roots keep the original input order
- An element whose parent is absent is a root of the working set
- Construction raises only DuplicateId; cycles are reported on request
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from jmi_converter import config
from jmi_converter.core.element import Element
from jmi_converter.core.errors import CycleDetected, DuplicateId, MultipleRoots

logger = logging.getLogger(__name__)


class HierarchyIndex:
    """ID lookup and child adjacency built from an arbitrary working set.

    The index keeps references to the input records; it never copies or
    mutates them.
    """

    def __init__(self, elements: Iterable[Element]) -> None:
        self.by_id: Dict[str, Element] = {}
        self.children_of: Dict[str, List[str]] = {}
        self._order: List[str] = []
        self._roots: List[str] = []

        for element in elements:
            if element.id in self.by_id:
                raise DuplicateId(element.id)
            self.by_id[element.id] = element
            self.children_of[element.id] = []
            self._order.append(element.id)

        for element_id in self._order:
            parent = self.by_id[element_id].parent
            if parent is not None and parent in self.by_id:
                self.children_of[parent].append(element_id)
            else:
                self._roots.append(element_id)

        logger.debug(
            "Indexed %d elements, %d roots", len(self._order), len(self._roots)
        )

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self.by_id

    @property
    def order(self) -> List[str]:
        """Element ids in original input order."""
        return list(self._order)

    def roots(self) -> List[str]:
        """Ids whose parent is null or outside the working set, in input order."""
        return list(self._roots)

    def orphans(self) -> List[str]:
        """Roots promoted only because their parent is missing from the working set."""
        return [i for i in self._roots if self.by_id[i].parent is not None]

    def parent_of(self, element_id: str) -> Optional[str]:
        """Parent id within the working set, or None for a working-set root."""
        parent = self.by_id[element_id].parent
        return parent if parent in self.by_id else None

    def stale_contains(self) -> List[str]:
        """Ids whose stamped ``contains`` differs from the computed child list.

        Only records that actually carry a stamp are compared; an empty
        stamp on an element with children counts as stale.
        """
        stale = []
        for element_id in self._order:
            stamped = self.by_id[element_id].contains
            computed = self.children_of[element_id]
            if (stamped or computed) and stamped != computed:
                stale.append(element_id)
        if stale:
            logger.debug("Ignoring stale 'contains' on %d elements", len(stale))
        return stale

    def depth_first(self) -> List[str]:
        """Pre-order ids over all roots, siblings in input order.

        Elements stranded on a parent cycle are not reachable from any
        root and are therefore absent; validate_acyclic() reports them.
        """
        result: List[str] = []
        stack = list(reversed(self._roots))
        while stack:
            element_id = stack.pop()
            result.append(element_id)
            stack.extend(reversed(self.children_of[element_id]))
        return result

    def subtree(self, element_id: str) -> List[str]:
        """Ids of element_id and all its working-set descendants, in pre-order.

        WHY: Deleting an element deletes everything it owns. The
        persistence layer uses this list as the cascade set.

        RULES:
        - Raises KeyError if element_id is not indexed
        - Only descendants present in the working set are returned
        """
        if element_id not in self.by_id:
            raise KeyError(element_id)
        result: List[str] = []
        seen = set()
        stack = [element_id]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            stack.extend(reversed(self.children_of[current]))
        return result

    def validate_acyclic(self) -> None:
        """Raise CycleDetected if the working set's parent relation has a cycle.

        WHY: Only a caller that needs a confirmed tree (a full-branch
        export, a nested JMI3 view) pays for this check.

        HOW: Each element has at most one in-set parent, so walking up
        from every unvisited element either reaches a visited element, a
        root, or an element already on the current walk. The last case
        is a cycle. Every element is walked at most once, so the check
        is linear.

        RULES:
        - The error names the cycle members in parent-walk order,
          starting from the first member reached
        - Parents outside the working set end a walk (partial-data policy)
        """
        done = set()
        for start in self._order:
            if start in done:
                continue
            path: List[str] = []
            on_path: Dict[str, int] = {}
            current: Optional[str] = start
            while current is not None and current not in done:
                if current in on_path:
                    cycle = path[on_path[current]:]
                    raise CycleDetected(cycle)
                on_path[current] = len(path)
                path.append(current)
                current = self.parent_of(current)
            done.update(path)

    def validate_single_root(self, root_id: Optional[str] = None) -> None:
        """Raise MultipleRoots if an element besides root_id has a null parent.

        Orphans promoted because their parent is missing from the working
        set do not count; only an explicit null parent does.
        """
        root_id = root_id or config.ROOT_ID
        extra = [
            i for i in self._roots
            if self.by_id[i].parent is None and i != root_id
        ]
        if extra:
            raise MultipleRoots(extra, root_id)
