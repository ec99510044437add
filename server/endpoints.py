"""
Access API routes: decision checks, school validation, director grants, audit sample.

Denials always come back as a bare "Access denied"; the decision reason only goes
to the audit trail.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from access import (
    AccessEngine,
    AccessLevel,
    Actor,
    CapabilityClass,
    GrantScope,
    Operation,
    ResourceDescriptor,
    classify,
)
from access.audit import get_audit_sample
from access.resources import RESOURCE_AUDIT_LOGS
from auth import require_actor
from database.database import get_db
from server import grants as grant_service
from server.data_access import engine_for

router = APIRouter(prefix="/api", tags=["Access"])


def get_engine(db: AsyncSession = Depends(get_db)) -> AccessEngine:
    """A fresh engine per request, reading through this request's session."""
    return engine_for(db)


def access_denied() -> HTTPException:
    return HTTPException(status_code=403, detail="Access denied")


# ============ DECISIONS ============

class AccessCheckRequest(BaseModel):
    resource: ResourceDescriptor
    operation: str = Field(..., description="read | list | create | update | delete")


class AccessCheckResponse(BaseModel):
    allowed: bool
    trace_id: str


class SchoolAccessResponse(BaseModel):
    has_access: bool
    access_level: AccessLevel


@router.post("/access/check", response_model=AccessCheckResponse)
async def check_access(
    body: AccessCheckRequest,
    actor: Actor = Depends(require_actor),
    engine: AccessEngine = Depends(get_engine),
):
    decision = await engine.can_access(actor, body.resource, body.operation)
    return AccessCheckResponse(allowed=decision.allowed, trace_id=decision.trace_id)


@router.get("/schools/{school_id}/access", response_model=SchoolAccessResponse)
async def school_access(
    school_id: str,
    required_scope: GrantScope = Query(GrantScope.READ_ONLY),
    actor: Actor = Depends(require_actor),
    engine: AccessEngine = Depends(get_engine),
):
    access = await engine.validate_school_access(actor, school_id, required_scope)
    return SchoolAccessResponse(has_access=access.has_access, access_level=access.access_level)


# ============ DIRECTOR GRANTS ============

class GrantRequest(BaseModel):
    school_id: str
    scope: GrantScope = GrantScope.FULL
    expires_at: datetime | None = None
    reason: str | None = None


class GrantResponse(BaseModel):
    director_id: str
    school_id: str
    scope: GrantScope
    is_active: bool
    expires_at: datetime | None = None


class ContextSwitchRequest(BaseModel):
    school_id: str
    reason: str | None = None


def _require_self_or_super(actor: Actor, director_id: str) -> None:
    if actor.id != director_id and classify(actor) is not CapabilityClass.PLATFORM_SUPER:
        raise access_denied()


def _require_director(actor: Actor) -> None:
    if classify(actor) is not CapabilityClass.SCHOOL_DIRECTOR:
        raise HTTPException(status_code=403, detail="Director privileges required")


@router.get("/directors/me/switch-history")
async def switch_history(
    limit: int = Query(50, ge=1, le=500),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    _require_director(actor)
    return {"entries": await grant_service.get_switch_history(db, actor.id, limit)}


@router.post("/directors/me/context")
async def switch_context(
    body: ContextSwitchRequest,
    request: Request,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    engine: AccessEngine = Depends(get_engine),
):
    _require_director(actor)
    session_info = {
        "reason": body.reason,
        "session_id": request.headers.get("X-Session-ID"),
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("User-Agent"),
    }
    return await grant_service.switch_school_context(db, engine, actor, body.school_id, session_info)


@router.get("/directors/{director_id}/schools")
async def director_schools(
    director_id: str,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    _require_self_or_super(actor, director_id)
    return {"schools": await grant_service.get_director_schools(db, director_id)}


@router.post("/directors/{director_id}/grants", response_model=GrantResponse, status_code=201)
async def create_grant(
    director_id: str,
    body: GrantRequest,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    row = await grant_service.grant_school_access(
        db, actor, director_id, body.school_id, body.scope, body.expires_at, body.reason,
    )
    return GrantResponse(
        director_id=row.director_id,
        school_id=row.school_id,
        scope=GrantScope(row.access_level),
        is_active=row.is_active,
        expires_at=row.expires_at,
    )


@router.delete("/directors/{director_id}/grants/{school_id}", status_code=204)
async def delete_grant(
    director_id: str,
    school_id: str,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    revoked = await grant_service.revoke_school_access(db, actor, director_id, school_id)
    if not revoked:
        raise HTTPException(status_code=404, detail="No grant for this director and school")


# ============ AUDIT ============

@router.get("/audit/sample")
async def audit_sample(
    limit: int = Query(20, ge=1, le=500),
    actor: Actor = Depends(require_actor),
    engine: AccessEngine = Depends(get_engine),
):
    decision = await engine.can_access(actor, ResourceDescriptor(resource_type=RESOURCE_AUDIT_LOGS), Operation.READ)
    if not decision.allowed:
        raise access_denied()
    return {"entries": get_audit_sample(limit)}
