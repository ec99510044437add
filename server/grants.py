# EduFam Access - director grant management and school context switching
import logging
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from access import (
    AccessEngine,
    AccessLevel,
    Actor,
    CapabilityClass,
    GrantPermissionError,
    GrantScope,
    GrantValidationError,
    classify,
)
from access.clock import as_naive_utc, utcnow
from database.models import (
    DirectorActiveContext,
    DirectorSchoolAccess,
    School,
    SchoolSwitchAudit,
    User,
)

logger = logging.getLogger(__name__)


async def can_manage_grants(session: AsyncSession, grantor: Actor, school_id: str) -> bool:
    """
    Who may grant or revoke director access to a school:
      - platform super users, anywhere
      - a director whose own school it is
      - a director holding a live full grant to it
    """
    capability = classify(grantor)
    if capability is CapabilityClass.PLATFORM_SUPER:
        return True
    if capability is not CapabilityClass.SCHOOL_DIRECTOR:
        return False
    if grantor.home_school_id == school_id:
        return True
    r = await session.execute(
        select(DirectorSchoolAccess).where(
            DirectorSchoolAccess.director_id == grantor.id,
            DirectorSchoolAccess.school_id == school_id,
            DirectorSchoolAccess.access_level == GrantScope.FULL.value,
            DirectorSchoolAccess.is_active.is_(True),
        )
    )
    row = r.scalar_one_or_none()
    return row is not None and (row.expires_at is None or row.expires_at > utcnow())


async def grant_school_access(
    session: AsyncSession,
    grantor: Actor,
    director_id: str,
    school_id: str,
    scope: GrantScope = GrantScope.FULL,
    expires_at: datetime | None = None,
    reason: str | None = None,
) -> DirectorSchoolAccess:
    """Create the grant, or re-activate and overwrite the existing row for this pair."""
    expires_at = as_naive_utc(expires_at)
    if expires_at is not None and expires_at <= utcnow():
        raise GrantValidationError("Expiry must be in the future")
    director = await session.get(User, director_id)
    if director is None or classify(Actor(id=director.id, role=director.role)) is not CapabilityClass.SCHOOL_DIRECTOR:
        raise GrantValidationError("Grants can only be given to school directors")
    if await session.get(School, school_id) is None:
        raise GrantValidationError("Unknown school")
    if not await can_manage_grants(session, grantor, school_id):
        raise GrantPermissionError("Insufficient permissions to grant access")

    r = await session.execute(
        select(DirectorSchoolAccess).where(
            DirectorSchoolAccess.director_id == director_id,
            DirectorSchoolAccess.school_id == school_id,
        )
    )
    row = r.scalar_one_or_none()
    if row is None:
        row = DirectorSchoolAccess(director_id=director_id, school_id=school_id)
        session.add(row)
    row.access_level = scope.value
    row.granted_by = grantor.id
    row.granted_at = utcnow()
    row.expires_at = expires_at
    row.access_reason = reason
    row.is_active = True
    await session.flush()
    logger.info("grant %s -> %s (%s) by %s", director_id, school_id, scope.value, grantor.id)
    return row


async def revoke_school_access(
    session: AsyncSession,
    revoker: Actor,
    director_id: str,
    school_id: str,
) -> bool:
    """Flip is_active in one statement. Returns False when there was nothing to revoke."""
    if not await can_manage_grants(session, revoker, school_id):
        raise GrantPermissionError("Insufficient permissions to revoke access")
    result = await session.execute(
        update(DirectorSchoolAccess)
        .where(
            DirectorSchoolAccess.director_id == director_id,
            DirectorSchoolAccess.school_id == school_id,
        )
        .values(is_active=False, updated_at=utcnow())
    )
    if not result.rowcount:
        return False
    await session.execute(
        delete(DirectorActiveContext).where(
            DirectorActiveContext.director_id == director_id,
            DirectorActiveContext.active_school_id == school_id,
        )
    )
    await session.flush()
    logger.info("revoke %s -> %s by %s", director_id, school_id, revoker.id)
    return True


async def get_director_schools(session: AsyncSession, director_id: str) -> list[dict]:
    """Live grants joined to school names, with the active context flagged."""
    now = utcnow()
    r = await session.execute(
        select(DirectorSchoolAccess, School.name)
        .join(School, School.id == DirectorSchoolAccess.school_id)
        .where(
            DirectorSchoolAccess.director_id == director_id,
            DirectorSchoolAccess.is_active.is_(True),
        )
        .order_by(School.name)
    )
    rows = [(g, name) for g, name in r.all() if g.expires_at is None or g.expires_at > now]
    context = await get_current_context(session, director_id)
    active_school = context.active_school_id if context else None
    return [
        {
            "school_id": g.school_id,
            "school_name": name,
            "access_level": g.access_level,
            "granted_at": g.granted_at,
            "expires_at": g.expires_at,
            "is_active_context": g.school_id == active_school,
        }
        for g, name in rows
    ]


async def get_current_context(session: AsyncSession, director_id: str) -> DirectorActiveContext | None:
    r = await session.execute(
        select(DirectorActiveContext).where(DirectorActiveContext.director_id == director_id)
    )
    return r.scalar_one_or_none()


async def switch_school_context(
    session: AsyncSession,
    engine: AccessEngine,
    actor: Actor,
    target_school_id: str,
    session_info: dict | None = None,
) -> dict:
    """Move a director's active school; the target must pass validate_school_access."""
    session_info = session_info or {}
    if classify(actor) is not CapabilityClass.SCHOOL_DIRECTOR:
        raise GrantPermissionError("Only school directors switch school context")
    access = await engine.validate_school_access(actor, target_school_id)
    if not access.has_access or access.access_level is not AccessLevel.DIRECTOR_GRANT:
        raise GrantPermissionError("Access denied to requested school")

    context = await get_current_context(session, actor.id)
    from_school_id = context.active_school_id if context else None
    reason = session_info.get("reason") or "Manual context switch"
    now = utcnow()

    audit = SchoolSwitchAudit(
        director_id=actor.id,
        from_school_id=from_school_id,
        to_school_id=target_school_id,
        session_id=session_info.get("session_id"),
        ip_address=session_info.get("ip_address"),
        user_agent=session_info.get("user_agent"),
        switch_reason=reason,
        switch_timestamp=now,
    )
    session.add(audit)
    if context is None:
        context = DirectorActiveContext(director_id=actor.id, active_school_id=target_school_id)
        session.add(context)
    context.previous_school_id = from_school_id
    context.active_school_id = target_school_id
    context.switch_reason = reason
    context.ip_address = session_info.get("ip_address")
    context.user_agent = session_info.get("user_agent")
    context.last_switched_at = now
    await session.flush()
    return {
        "audit_id": audit.id,
        "previous_school": from_school_id,
        "current_school": target_school_id,
        "switched_at": now,
    }


async def get_switch_history(session: AsyncSession, director_id: str, limit: int = 50) -> list[dict]:
    r = await session.execute(
        select(SchoolSwitchAudit)
        .where(SchoolSwitchAudit.director_id == director_id)
        .order_by(SchoolSwitchAudit.switch_timestamp.desc())
        .limit(limit)
    )
    return [
        {
            "id": a.id,
            "from_school_id": a.from_school_id,
            "to_school_id": a.to_school_id,
            "switch_reason": a.switch_reason,
            "switch_timestamp": a.switch_timestamp,
        }
        for a in r.scalars().all()
    ]
