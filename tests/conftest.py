"""Shared test fixtures for the jmi_converter test suite.

WHY: Most test modules need the same two working sets: the minimal
three-element chain used by the documented scenarios, and a small but
realistic branch with packages, relationships, a cross-project
reference, an archived element and stale ``contains`` stamps.
Centralizing them keeps every module testing against the same data.

HOW: Records are kept as module-level wire dicts. Fixtures hand out deep
copies (so a test can never leak mutations into another) and validated
Element lists built with load_elements().

RULES:
- SCENARIO_RECORDS is exactly model → pkg1 → e1
- BRANCH_RECORDS input order: model, pkg1, pkg2, e1, e2, rel1, rel2, old
- model's stamped contains is deliberately stale (pkg2 missing)
- rel2's source lives in another project (org2/proj2/master)
"""

import copy
from typing import Any, Dict, List

import pytest

from jmi_converter.core.element import load_elements
from jmi_converter.core.ids import Namespace


SCOPE = Namespace("org1", "proj1", "master")
FOREIGN = Namespace("org2", "proj2", "master")

SCENARIO_RECORDS: List[Dict[str, Any]] = [
    {"id": "model", "parent": None},
    {"id": "pkg1", "parent": "model"},
    {"id": "e1", "parent": "pkg1"},
]

BRANCH_RECORDS: List[Dict[str, Any]] = [
    {"id": "model", "name": "Model", "parent": None, "type": "Model", "contains": ["pkg1"]},
    {"id": "pkg1", "name": "Structure", "parent": "model", "type": "Package",
     "contains": ["e1", "e2"]},
    {"id": "pkg2", "name": "Interfaces", "parent": "model", "type": "Package"},
    {"id": "e1", "name": "Pump", "parent": "pkg1", "type": "Block",
     "documentation": "Main coolant pump", "createdBy": "alice"},
    {"id": "e2", "name": "Valve", "parent": "pkg1", "type": "Block",
     "custom": {"mass_kg": 4.2}},
    {"id": "rel1", "name": "Feeds", "parent": "pkg2", "type": "Relationship",
     "source": "e1", "target": "e2"},
    {"id": "rel2", "name": "Imports", "parent": "pkg2", "type": "Relationship",
     "source": "ext-elem", "sourceNamespace": FOREIGN.to_dict(), "target": "e1"},
    {"id": "old", "name": "Retired", "parent": "pkg2", "type": "Block", "archived": True},
]


@pytest.fixture
def scenario_records():
    """model → pkg1 → e1 as raw wire records."""
    return copy.deepcopy(SCENARIO_RECORDS)


@pytest.fixture
def scenario_elements():
    """model → pkg1 → e1 as validated Elements."""
    return load_elements(copy.deepcopy(SCENARIO_RECORDS))


@pytest.fixture
def branch_records():
    """The realistic branch as raw wire records."""
    return copy.deepcopy(BRANCH_RECORDS)


@pytest.fixture
def branch_elements():
    """The realistic branch as validated Elements in the org1/proj1/master scope."""
    return load_elements(copy.deepcopy(BRANCH_RECORDS), SCOPE)
