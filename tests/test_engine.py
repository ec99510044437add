"""Decision API tests: audit trail, ensure(), validate_school_access."""

import pytest

from access import (
    AccessDenied,
    AccessEngine,
    AccessLevel,
    Actor,
    DecisionReason,
    GrantLookupError,
    GrantScope,
    Operation,
    ResourceDescriptor,
    SchoolGrant,
)
from access.audit import get_audit_sample


@pytest.fixture
def engine(grant_store, relation_store):
    return AccessEngine(grant_store, relation_store)


def staff_in(school):
    return ResourceDescriptor(resource_type="staff", school_id=school)


@pytest.mark.asyncio
async def test_can_access_returns_decision_with_trace(engine):
    user = Actor(id="U1", role="principal", home_school_id="S1")
    decision = await engine.can_access(user, staff_in("S1"), Operation.READ)
    assert decision.allowed
    assert decision.reason is DecisionReason.SCHOOL_MATCH
    assert decision.trace_id.startswith("tr-")


@pytest.mark.asyncio
async def test_every_decision_is_audited(engine):
    user = Actor(id="U1", role="principal", home_school_id="S1")
    allowed = await engine.can_access(user, staff_in("S1"), "read", trace_id="tr-allow")
    denied = await engine.can_access(user, staff_in("S2"), "delete", trace_id="tr-deny")

    entries = get_audit_sample()
    assert [e["trace_id"] for e in entries] == ["tr-allow", "tr-deny"]
    assert entries[0]["allowed"] is True
    assert entries[0]["reason"] == "school-match"
    assert entries[1]["allowed"] is False
    assert entries[1]["reason"] == "no-matching-rule"
    assert entries[1]["operation"] == "delete"
    assert entries[1]["capability"] == "standard_user"
    assert allowed.trace_id == "tr-allow" and denied.trace_id == "tr-deny"


@pytest.mark.asyncio
async def test_unknown_operation_audited_verbatim(engine):
    user = Actor(id="U1", role="principal", home_school_id="S1")
    await engine.can_access(user, staff_in("S1"), "approve")
    assert get_audit_sample()[-1]["operation"] == "approve"


@pytest.mark.asyncio
async def test_ensure_raises_generic_denial(engine):
    user = Actor(id="U1", role="principal", home_school_id="S1")
    with pytest.raises(AccessDenied) as exc:
        await engine.ensure(user, staff_in("S2"), "read")
    assert str(exc.value) == "Access denied"
    assert exc.value.trace_id


@pytest.mark.asyncio
async def test_ensure_passes_through_allow(engine):
    admin = Actor(id="A1", role="edufam_admin")
    decision = await engine.ensure(admin, staff_in("S2"), "delete")
    assert decision.reason is DecisionReason.PLATFORM_OVERRIDE


@pytest.mark.asyncio
async def test_validate_school_access_levels(engine, grant_store):
    grant_store.grants = [SchoolGrant(director_id="D1", school_id="S2")]

    admin = await engine.validate_school_access(Actor(id="A1", role="engineer"), "S5")
    home = await engine.validate_school_access(Actor(id="U1", role="hr", home_school_id="S1"), "S1")
    grant = await engine.validate_school_access(Actor(id="D1", role="school_director"), "S2")
    other = await engine.validate_school_access(Actor(id="U1", role="hr", home_school_id="S1"), "S2")

    assert (admin.has_access, admin.access_level) == (True, AccessLevel.ADMIN_OVERRIDE)
    assert (home.has_access, home.access_level) == (True, AccessLevel.HOME_SCHOOL)
    assert (grant.has_access, grant.access_level) == (True, AccessLevel.DIRECTOR_GRANT)
    assert (other.has_access, other.access_level) == (False, AccessLevel.NONE)


@pytest.mark.asyncio
async def test_validate_school_access_respects_required_scope(engine, grant_store):
    grant_store.grants = [SchoolGrant(director_id="D1", school_id="S2", scope=GrantScope.READ_ONLY)]
    director = Actor(id="D1", role="school_director")
    assert (await engine.validate_school_access(director, "S2")).has_access
    assert not (await engine.validate_school_access(director, "S2", GrantScope.FULL)).has_access


@pytest.mark.asyncio
async def test_validate_school_access_without_school(engine):
    result = await engine.validate_school_access(Actor(id="A1", role="super_admin"), None)
    assert not result.has_access


@pytest.mark.asyncio
async def test_lookup_failure_is_not_audited_as_decision(engine, grant_store):
    grant_store.fail = True
    with pytest.raises(GrantLookupError):
        await engine.can_access(Actor(id="D1", role="school_director"), staff_in("S1"), "read")
    assert get_audit_sample() == []


@pytest.mark.asyncio
async def test_accessible_schools_lists_live_grants(engine, grant_store):
    grant_store.grants = [
        SchoolGrant(director_id="D1", school_id="S1"),
        SchoolGrant(director_id="D1", school_id="S2", is_active=False),
    ]
    schools = await engine.accessible_schools(Actor(id="D1", role="school_director"))
    assert schools.school_ids == frozenset({"S1"})
    assert "S2" not in schools
