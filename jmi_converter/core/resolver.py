"""Cross-reference resolution contract for source/target pointers.

WHY: Relationship elements point at their ends through ``source`` and
``target``, and those ends may live in another project or branch.
Deciding whether a pointer can be followed inside the current working
set, or must be fetched from elsewhere, is a lookup the persistence
layer owns. The core only fixes the shape of the answer, so converters
and exporters can report foreign references without knowing how they
are stored.

HOW: ResolutionHint is either Local or Foreign(namespace).
CrossReferenceResolver is the abstract contract. ScopeResolver is the
lookup-free default: it decides purely from the pointer's namespace and
the working-set scope. cross_references() walks a working set and lists
every pointer with its hint.

RULES:
- Resolution never changes a record; conversion passes pointers through
- A pointer without a namespace is Local
- A namespace equal to the working-set scope is Local
- Anything else is Foreign, carrying the pointee's namespace
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional

from jmi_converter.core.element import Element
from jmi_converter.core.ids import Namespace


@dataclass(frozen=True)
class ResolutionHint:
    """Where a pointer resolves: the current branch or a foreign namespace."""

    namespace: Optional[Namespace] = None

    @property
    def is_local(self) -> bool:
        return self.namespace is None

    @classmethod
    def local(cls) -> ResolutionHint:
        return cls()

    @classmethod
    def foreign(cls, namespace: Namespace) -> ResolutionHint:
        return cls(namespace)


@dataclass(frozen=True)
class CrossReference:
    """One source or target pointer found in a working set."""

    element_id: str
    role: str  # "source" or "target"
    pointer: str
    hint: ResolutionHint


class CrossReferenceResolver(ABC):
    """Contract for deciding where a source/target pointer resolves.

    To plug in a storage-backed resolver:
    1. Subclass CrossReferenceResolver
    2. Implement resolve()
    3. Pass an instance to cross_references()
    """

    @abstractmethod
    def resolve(self, pointer: str, namespace: Optional[Namespace]) -> ResolutionHint:
        """Resolve one pointer.

        Args:
            pointer: Local id of the pointee.
            namespace: The pointer's namespace field, None when absent.

        Returns:
            ResolutionHint.local() or ResolutionHint.foreign(namespace).
        """


class ScopeResolver(CrossReferenceResolver):
    """Resolve by comparing namespaces only; no storage lookup."""

    def __init__(self, scope: Optional[Namespace] = None) -> None:
        self.scope = scope

    def resolve(self, pointer: str, namespace: Optional[Namespace]) -> ResolutionHint:
        if namespace is None or namespace == self.scope:
            return ResolutionHint.local()
        return ResolutionHint.foreign(namespace)


def cross_references(
    elements: Iterable[Element],
    resolver: Optional[CrossReferenceResolver] = None,
) -> List[CrossReference]:
    """List every source/target pointer in a working set with its resolution.

    Elements without a source/target pair contribute nothing. Order is
    input order, source before target.
    """
    resolver = resolver or ScopeResolver()
    refs: List[CrossReference] = []
    for element in elements:
        if element.source is None:
            continue
        for role, pointer, namespace in (
            ("source", element.source, element.source_namespace),
            ("target", element.target, element.target_namespace),
        ):
            refs.append(CrossReference(
                element_id=element.id,
                role=role,
                pointer=pointer,
                hint=resolver.resolve(pointer, namespace),
            ))
    return refs
