"""Shared fixtures: protocol fakes for the engine, an in-memory database for the adapters."""

import os

os.environ.setdefault("EDUFAM_SECRET_KEY", "test-secret-key")
os.environ.setdefault("EDUFAM_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from access import (
    GrantLookupError,
    ParentChildLink,
    RelationshipLookupError,
    SchoolGrant,
    TeacherClassLink,
)
from access.audit import clear_audit_sample
from database.models import Base


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeGrantStore:
    """In-memory grant table; mutate .grants between calls to simulate admin actions."""

    def __init__(self, grants=None):
        self.grants: list[SchoolGrant] = list(grants or [])
        self.calls = 0
        self.fail = False

    async def grants_for_director(self, director_id):
        self.calls += 1
        if self.fail:
            raise GrantLookupError("grant table unavailable")
        return [g for g in self.grants if g.director_id == director_id]

    def revoke(self, director_id, school_id):
        self.grants = [
            g.model_copy(update={"is_active": False})
            if g.director_id == director_id and g.school_id == school_id else g
            for g in self.grants
        ]


class FakeRelationStore:
    def __init__(self, children=None, rosters=None, assignments=None):
        self.children: dict[str, set[str]] = {k: set(v) for k, v in (children or {}).items()}
        # class_id -> student ids, teacher_id -> class ids
        self.rosters: dict[str, set[str]] = {k: set(v) for k, v in (rosters or {}).items()}
        self.assignments: dict[str, set[str]] = {k: set(v) for k, v in (assignments or {}).items()}
        self.calls = 0
        self.fail = False

    async def parent_links(self, parent_id):
        self.calls += 1
        if self.fail:
            raise RelationshipLookupError("enrollments unavailable")
        return [ParentChildLink(parent_id=parent_id, student_id=s) for s in sorted(self.children.get(parent_id, ()))]

    async def teacher_links(self, teacher_id):
        self.calls += 1
        if self.fail:
            raise RelationshipLookupError("assignments unavailable")
        return [TeacherClassLink(teacher_id=teacher_id, class_id=c) for c in sorted(self.assignments.get(teacher_id, ()))]

    async def roster(self, class_ids):
        self.calls += 1
        if self.fail:
            raise RelationshipLookupError("rosters unavailable")
        students = set()
        for class_id in class_ids:
            students |= self.rosters.get(class_id, set())
        return students


@pytest.fixture
def grant_store():
    return FakeGrantStore()


@pytest.fixture
def relation_store():
    return FakeRelationStore()


@pytest.fixture(autouse=True)
def _clean_audit_sample():
    clear_audit_sample()
    yield
    clear_audit_sample()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session
