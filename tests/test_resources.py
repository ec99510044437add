"""Resource type registry."""

import pytest

from access import Actor, CapabilityClass, DecisionReason, ResourceDescriptor, decide
from access.resources import (
    RELATION_STUDENT,
    RESOURCE_TYPES,
    ResourceDomain,
    ResourceScope,
    ResourceType,
    get_resource_type,
    register_resource_type,
)

REPORT_CARDS = ResourceType(
    "report_cards",
    ResourceScope.SCHOOL,
    ResourceDomain.ACADEMIC,
    RELATION_STUDENT,
    frozenset({CapabilityClass.PARENT}),
)


@pytest.fixture
def registry():
    before = dict(RESOURCE_TYPES)
    yield RESOURCE_TYPES
    RESOURCE_TYPES.clear()
    RESOURCE_TYPES.update(before)


def test_builtin_catalogue_is_consistent():
    for rtype in RESOURCE_TYPES.values():
        if rtype.relationship_readers:
            assert rtype.scope is ResourceScope.SCHOOL
            assert rtype.relation == RELATION_STUDENT
        if rtype.scope is not ResourceScope.SCHOOL:
            assert rtype.admin_gated
    assert get_resource_type(None) is None
    assert get_resource_type("") is None


def test_register_new_type_and_identical_reregistration(registry):
    register_resource_type(REPORT_CARDS)
    assert get_resource_type("report_cards") is REPORT_CARDS
    register_resource_type(ResourceType(**vars(REPORT_CARDS)))
    assert registry["report_cards"] == REPORT_CARDS


def test_reregistering_with_different_shape_rejected(registry):
    with pytest.raises(ValueError):
        register_resource_type(ResourceType("grades", ResourceScope.SCHOOL, ResourceDomain.FINANCIAL))
    assert registry["grades"].domain is ResourceDomain.ACADEMIC


@pytest.mark.parametrize(
    "bad",
    [
        ResourceType("diaries", ResourceScope.USER, relation=RELATION_STUDENT,
                     relationship_readers=frozenset({CapabilityClass.PARENT})),
        ResourceType("diaries", ResourceScope.SCHOOL, relation=None,
                     relationship_readers=frozenset({CapabilityClass.PARENT})),
        ResourceType("diaries", ResourceScope.SCHOOL, relation="class",
                     relationship_readers=frozenset({CapabilityClass.TEACHER})),
        ResourceType("diaries", ResourceScope.SCHOOL, relation=RELATION_STUDENT,
                     relationship_readers=frozenset({CapabilityClass.STANDARD_USER})),
    ],
)
def test_bad_relationship_shapes_rejected(registry, bad):
    with pytest.raises(ValueError):
        register_resource_type(bad)
    assert "diaries" not in registry


@pytest.mark.asyncio
async def test_registered_type_takes_effect_in_decisions(registry, grant_store, relation_store):
    parent = Actor(id="P1", role="parent", home_school_id="S9")
    card = ResourceDescriptor(resource_type="report_cards", school_id="S1", owner_ids_by_relation={"student": "C1"})
    relation_store.children = {"P1": {"C1"}}

    assert not (await decide(parent, card, "read", grant_store, relation_store)).allowed

    register_resource_type(REPORT_CARDS)
    decision = await decide(parent, card, "read", grant_store, relation_store)
    assert decision.allowed and decision.reason is DecisionReason.RELATIONSHIP_MATCH
    principal = Actor(id="U1", role="principal", home_school_id="S1")
    assert (await decide(principal, card, "update", grant_store, relation_store)).reason is DecisionReason.SCHOOL_MATCH
