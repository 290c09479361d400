"""Unit tests for HierarchyIndex.

WHY: The index is where partial working sets, stale ``contains`` stamps
and duplicate ids are handled. Every conversion relies on it, so its
ordering and root-promotion rules are pinned down here.
"""

import pytest

from jmi_converter.core.element import load_elements
from jmi_converter.core.errors import (
    CycleDetected,
    DuplicateId,
    InternalInvariantError,
    MultipleRoots,
)
from jmi_converter.core.hierarchy import HierarchyIndex


def _index(records):
    return HierarchyIndex(load_elements(records))


class TestConstruction:
    """Lookup table, adjacency and roots."""

    def test_by_id(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert len(index) == 8
        assert index.by_id["e1"] is branch_elements[3]
        assert "e1" in index
        assert "ghost" not in index

    def test_every_id_has_children_entry(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert set(index.children_of) == {e.id for e in branch_elements}
        assert index.children_of["e1"] == []

    def test_children_in_input_order(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.children_of["model"] == ["pkg1", "pkg2"]
        assert index.children_of["pkg2"] == ["rel1", "rel2", "old"]

    def test_children_ignore_contains_stamp(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        # model is stamped with ["pkg1"] only
        assert index.children_of["model"] == ["pkg1", "pkg2"]

    def test_single_root(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.roots() == ["model"]
        assert index.orphans() == []

    def test_missing_parent_promotes_to_root(self, scenario_records):
        index = _index([r for r in scenario_records if r["id"] != "pkg1"])
        assert index.roots() == ["model", "e1"]
        assert index.orphans() == ["e1"]
        assert index.parent_of("e1") is None

    def test_duplicate_id(self, scenario_records):
        scenario_records.append({"id": "pkg1", "parent": "model"})
        with pytest.raises(DuplicateId) as exc_info:
            _index(scenario_records)
        assert exc_info.value.id == "pkg1"

    def test_order(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.order == [e.id for e in branch_elements]

    def test_empty(self):
        index = HierarchyIndex([])
        assert len(index) == 0
        assert index.roots() == []
        assert index.depth_first() == []


class TestStaleContains:
    """Detection of out-of-date ``contains`` stamps."""

    def test_reports_stale_stamps(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.stale_contains() == ["model", "pkg2"]

    def test_accurate_stamps(self):
        index = _index([
            {"id": "model", "parent": None, "contains": ["a"]},
            {"id": "a", "parent": "model"},
        ])
        assert index.stale_contains() == []


class TestTraversal:
    """Depth-first order and subtrees."""

    def test_depth_first(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.depth_first() == [
            "model", "pkg1", "e1", "e2", "pkg2", "rel1", "rel2", "old",
        ]

    def test_subtree(self, branch_elements):
        index = HierarchyIndex(branch_elements)
        assert index.subtree("pkg2") == ["pkg2", "rel1", "rel2", "old"]
        assert index.subtree("e1") == ["e1"]

    def test_subtree_unknown_id(self, branch_elements):
        with pytest.raises(KeyError):
            HierarchyIndex(branch_elements).subtree("ghost")

    def test_deep_chain(self):
        records = [{"id": "n0", "parent": None}]
        records += [{"id": "n{}".format(i), "parent": "n{}".format(i - 1)} for i in range(1, 5000)]
        index = _index(records)
        assert len(index.depth_first()) == 5000
        assert len(index.subtree("n0")) == 5000
        index.validate_acyclic()


class TestValidateAcyclic:
    """Parent cycle detection."""

    def test_tree_passes(self, branch_elements):
        HierarchyIndex(branch_elements).validate_acyclic()

    def test_three_cycle(self):
        index = _index([
            {"id": "a", "parent": "b"},
            {"id": "b", "parent": "c"},
            {"id": "c", "parent": "a"},
        ])
        with pytest.raises(CycleDetected) as exc_info:
            index.validate_acyclic()
        assert exc_info.value.ids == ["a", "b", "c"]

    def test_self_parent(self):
        index = _index([{"id": "x", "parent": "x"}])
        with pytest.raises(CycleDetected) as exc_info:
            index.validate_acyclic()
        assert exc_info.value.ids == ["x"]

    def test_cycle_below_tail(self):
        index = _index([
            {"id": "model", "parent": None},
            {"id": "tail", "parent": "a"},
            {"id": "a", "parent": "b"},
            {"id": "b", "parent": "a"},
        ])
        with pytest.raises(CycleDetected) as exc_info:
            index.validate_acyclic()
        assert set(exc_info.value.ids) == {"a", "b"}
        assert "tail" not in exc_info.value.ids

    def test_cycle_is_server_error(self):
        index = _index([{"id": "x", "parent": "x"}])
        with pytest.raises(InternalInvariantError) as exc_info:
            index.validate_acyclic()
        assert exc_info.value.status_code == 500

    def test_missing_parent_ends_walk(self, scenario_records):
        index = _index([r for r in scenario_records if r["id"] != "model"])
        index.validate_acyclic()


class TestValidateSingleRoot:
    """Only the canonical model root may have a null parent."""

    def test_branch_passes(self, branch_elements):
        HierarchyIndex(branch_elements).validate_single_root()

    def test_orphans_do_not_count(self, scenario_records):
        index = _index([r for r in scenario_records if r["id"] != "pkg1"])
        index.validate_single_root()

    def test_second_null_parent(self, scenario_records):
        scenario_records.append({"id": "stray", "parent": None})
        with pytest.raises(MultipleRoots) as exc_info:
            _index(scenario_records).validate_single_root()
        assert exc_info.value.ids == ["stray"]
        assert exc_info.value.root_id == "model"
        assert exc_info.value.status_code == 500

    def test_explicit_root_id(self):
        index = _index([{"id": "top", "parent": None}, {"id": "a", "parent": "top"}])
        index.validate_single_root("top")
        with pytest.raises(MultipleRoots):
            index.validate_single_root()
