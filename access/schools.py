# EduFam Access - school access resolver (home school, director grants, platform reach)
import logging
from typing import Protocol

from .capability import classify, is_platform
from .clock import utcnow
from .models import AccessLevel, Actor, CapabilityClass, GrantScope, SchoolGrant

logger = logging.getLogger(__name__)


class GrantStore(Protocol):
    async def grants_for_director(self, director_id: str) -> list[SchoolGrant]:
        """Current grant rows for a director, active or not. Raise GrantLookupError on failure."""
        ...


class SchoolSet:
    """Schools an actor may touch: every school, or a finite set with the way each was reached."""

    __slots__ = ("is_all", "_schools", "_level")

    def __init__(self, schools: dict[str, GrantScope | None] | None = None, *, is_all: bool = False,
                 level: AccessLevel = AccessLevel.NONE):
        self.is_all = is_all
        self._schools = dict(schools or {})
        self._level = level

    @classmethod
    def all(cls) -> "SchoolSet":
        return cls(is_all=True, level=AccessLevel.ADMIN_OVERRIDE)

    @classmethod
    def empty(cls) -> "SchoolSet":
        return cls()

    @classmethod
    def home(cls, school_id: str | None) -> "SchoolSet":
        if not school_id:
            return cls()
        return cls({school_id: None}, level=AccessLevel.HOME_SCHOOL)

    @classmethod
    def granted(cls, grants: dict[str, GrantScope]) -> "SchoolSet":
        return cls(grants, level=AccessLevel.DIRECTOR_GRANT)

    def __contains__(self, school_id: object) -> bool:
        if not school_id:
            return False
        return self.is_all or school_id in self._schools

    def __len__(self) -> int:
        return len(self._schools)

    def __repr__(self) -> str:
        if self.is_all:
            return "SchoolSet(ALL)"
        return f"SchoolSet({sorted(self._schools)!r}, level={self._level.value})"

    @property
    def school_ids(self) -> frozenset[str]:
        return frozenset(self._schools)

    @property
    def access_level(self) -> AccessLevel:
        return self._level

    def scope_for(self, school_id: str) -> GrantScope | None:
        """Grant scope when the school was reached through a director grant, else None."""
        if self.is_all:
            return None
        return self._schools.get(school_id)


async def resolve_schools(actor: Actor, grants: GrantStore) -> SchoolSet:
    """Fresh lookup on every call; nothing is cached between decisions."""
    capability = classify(actor)
    if is_platform(capability):
        return SchoolSet.all()
    if capability is CapabilityClass.SCHOOL_DIRECTOR:
        return await _director_schools(actor, grants)
    if capability in (CapabilityClass.STANDARD_USER, CapabilityClass.TEACHER, CapabilityClass.PARENT):
        return SchoolSet.home(actor.home_school_id)
    return SchoolSet.empty()


async def _director_schools(actor: Actor, grants: GrantStore) -> SchoolSet:
    # Directors have no implicit home-school fallback: no live grant, no school.
    # One grant row per (director, school), unique in director_school_access.
    now = utcnow()
    rows = await grants.grants_for_director(actor.id)
    live: dict[str, GrantScope] = {}
    for grant in rows:
        if grant.director_id != actor.id or not grant.is_live(now):
            continue
        live[grant.school_id] = grant.scope
    logger.debug("director %s resolved to %d school(s)", actor.id, len(live))
    return SchoolSet.granted(live)


def scope_satisfies(scope: GrantScope | None, required: GrantScope) -> bool:
    """Grant scope hierarchy: full > financial_only / academic_only > read_only."""
    if scope is None or scope is GrantScope.FULL:
        return True
    if required is GrantScope.READ_ONLY:
        return True
    return scope is required
