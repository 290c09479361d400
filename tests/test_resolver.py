"""Unit tests for cross-reference resolution."""

from jmi_converter.core.element import load_elements
from jmi_converter.core.ids import Namespace
from jmi_converter.core.resolver import (
    CrossReferenceResolver,
    ResolutionHint,
    ScopeResolver,
    cross_references,
)

SCOPE = Namespace("org1", "proj1", "master")
FOREIGN = Namespace("org2", "proj2", "master")


class TestScopeResolver:
    """Namespace-only resolution."""

    def test_no_namespace_is_local(self):
        assert ScopeResolver(SCOPE).resolve("e1", None).is_local

    def test_own_scope_is_local(self):
        assert ScopeResolver(SCOPE).resolve("e1", SCOPE) == ResolutionHint.local()

    def test_other_project_is_foreign(self):
        hint = ScopeResolver(SCOPE).resolve("x", FOREIGN)
        assert not hint.is_local
        assert hint == ResolutionHint.foreign(FOREIGN)

    def test_other_branch_is_foreign(self):
        other_branch = Namespace("org1", "proj1", "dev")
        assert not ScopeResolver(SCOPE).resolve("e1", other_branch).is_local


class TestCrossReferences:
    """Listing every pointer in a working set."""

    def test_branch_pointers(self, branch_elements):
        refs = cross_references(branch_elements, ScopeResolver(SCOPE))
        assert [(r.element_id, r.role, r.pointer) for r in refs] == [
            ("rel1", "source", "e1"),
            ("rel1", "target", "e2"),
            ("rel2", "source", "ext-elem"),
            ("rel2", "target", "e1"),
        ]
        assert [r.hint.is_local for r in refs] == [True, True, False, True]
        assert refs[2].hint.namespace == FOREIGN

    def test_default_resolver(self, branch_elements):
        refs = cross_references(branch_elements)
        assert len(refs) == 4

    def test_no_pointers(self, scenario_elements):
        assert cross_references(scenario_elements) == []

    def test_custom_resolver(self):
        class KnownIds(CrossReferenceResolver):
            def __init__(self, known):
                self.known = set(known)

            def resolve(self, pointer, namespace):
                if pointer in self.known:
                    return ResolutionHint.local()
                return ResolutionHint.foreign(namespace or FOREIGN)

        elements = load_elements([
            {"id": "rel", "parent": None, "source": "a", "target": "zzz"},
        ])
        refs = cross_references(elements, KnownIds(["a"]))
        assert refs[0].hint.is_local
        assert refs[1].hint.namespace == FOREIGN
