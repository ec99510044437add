"""Relationship resolver tests."""

import pytest

from access import (
    NOT_APPLICABLE,
    Actor,
    CapabilityClass,
    RelationshipLookupError,
    resolve_relation_ids,
)

PARENT = Actor(id="P1", role="parent")
TEACHER = Actor(id="T1", role="teacher", home_school_id="S1")


@pytest.mark.asyncio
async def test_parent_gets_linked_children_for_student_keyed_types(relation_store):
    relation_store.children = {"P1": {"C1", "C2"}, "P2": {"C9"}}
    for rtype in ("students", "grades", "payments"):
        ids = await resolve_relation_ids(PARENT, CapabilityClass.PARENT, rtype, relation_store)
        assert ids == frozenset({"C1", "C2"})


@pytest.mark.asyncio
async def test_teacher_gets_roster_of_assigned_classes(relation_store):
    relation_store.assignments = {"T1": {"K"}}
    relation_store.rosters = {"K": {"C3", "C4"}, "other": {"C5"}}
    ids = await resolve_relation_ids(TEACHER, CapabilityClass.TEACHER, "students", relation_store)
    assert ids == frozenset({"C3", "C4"})


@pytest.mark.asyncio
async def test_teacher_not_reader_of_financial_types(relation_store):
    relation_store.assignments = {"T1": {"K"}}
    relation_store.rosters = {"K": {"C3"}}
    result = await resolve_relation_ids(TEACHER, CapabilityClass.TEACHER, "payments", relation_store)
    assert result is NOT_APPLICABLE
    assert relation_store.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "capability, rtype",
    [
        (CapabilityClass.PARENT, "staff"),
        (CapabilityClass.PARENT, "users"),
        (CapabilityClass.PARENT, "no_such_type"),
        (CapabilityClass.STANDARD_USER, "students"),
        (CapabilityClass.SCHOOL_DIRECTOR, "grades"),
        (CapabilityClass.ANONYMOUS, "students"),
    ],
)
async def test_other_combinations_not_applicable(relation_store, capability, rtype):
    result = await resolve_relation_ids(PARENT, capability, rtype, relation_store)
    assert result is NOT_APPLICABLE
    assert not result


@pytest.mark.asyncio
async def test_links_read_fresh_each_time(relation_store):
    relation_store.assignments = {"T1": {"K"}}
    relation_store.rosters = {"K": {"C3", "C4"}}
    first = await resolve_relation_ids(TEACHER, CapabilityClass.TEACHER, "students", relation_store)
    relation_store.rosters["K"].discard("C3")
    second = await resolve_relation_ids(TEACHER, CapabilityClass.TEACHER, "students", relation_store)
    assert "C3" in first
    assert "C3" not in second


@pytest.mark.asyncio
async def test_lookup_failure_propagates(relation_store):
    relation_store.fail = True
    with pytest.raises(RelationshipLookupError):
        await resolve_relation_ids(PARENT, CapabilityClass.PARENT, "grades", relation_store)
