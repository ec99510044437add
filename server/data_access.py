# EduFam Access - SQLAlchemy adapters for the engine's grant and relationship lookups
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from access import (
    AccessEngine,
    GrantLookupError,
    GrantScope,
    ParentChildLink,
    RelationshipLookupError,
    ResourceDescriptor,
    SchoolGrant,
    TeacherClassLink,
)
from access.resources import RESOURCE_GRADES, RESOURCE_STUDENTS, RESOURCE_USERS
from database.models import (
    DirectorSchoolAccess,
    Enrollment,
    Grade,
    Student,
    TeacherAssignment,
    User,
)


def _to_grant(row: DirectorSchoolAccess) -> SchoolGrant:
    try:
        scope = GrantScope(row.access_level)
    except ValueError:
        # Unknown stored level: the narrowest scope
        scope = GrantScope.READ_ONLY
    return SchoolGrant(
        director_id=row.director_id,
        school_id=row.school_id,
        is_active=bool(row.is_active),
        scope=scope,
        expires_at=row.expires_at,
    )


class SqlGrantStore:
    """Reads director_school_access on every call; no caching across requests."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def grants_for_director(self, director_id: str) -> list[SchoolGrant]:
        try:
            r = await self.session.execute(
                select(DirectorSchoolAccess).where(DirectorSchoolAccess.director_id == director_id)
            )
            rows = r.scalars().all()
        except SQLAlchemyError as exc:
            raise GrantLookupError(f"Failed to read grants for director {director_id}") from exc
        return [_to_grant(row) for row in rows]


class SqlRelationStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def parent_links(self, parent_id: str) -> list[ParentChildLink]:
        try:
            r = await self.session.execute(
                select(Enrollment.parent_id, Enrollment.student_id).where(Enrollment.parent_id == parent_id)
            )
            rows = r.all()
        except SQLAlchemyError as exc:
            raise RelationshipLookupError(f"Failed to read children of parent {parent_id}") from exc
        return [ParentChildLink(parent_id=p, student_id=s) for p, s in rows]

    async def teacher_links(self, teacher_id: str) -> list[TeacherClassLink]:
        try:
            r = await self.session.execute(
                select(TeacherAssignment.teacher_id, TeacherAssignment.class_id).where(
                    TeacherAssignment.teacher_id == teacher_id,
                    TeacherAssignment.is_active.is_(True),
                )
            )
            rows = r.all()
        except SQLAlchemyError as exc:
            raise RelationshipLookupError(f"Failed to read assignments for teacher {teacher_id}") from exc
        return [TeacherClassLink(teacher_id=t, class_id=c) for t, c in rows]

    async def roster(self, class_ids) -> set[str]:
        class_ids = list(class_ids)
        if not class_ids:
            return set()
        try:
            r = await self.session.execute(select(Student.id).where(Student.class_id.in_(class_ids)))
            return set(r.scalars().all())
        except SQLAlchemyError as exc:
            raise RelationshipLookupError("Failed to read class rosters") from exc


def engine_for(session: AsyncSession) -> AccessEngine:
    return AccessEngine(SqlGrantStore(session), SqlRelationStore(session))


# --- Descriptor builders: each resource owner declares its shape once ---

def describe_student(student: Student) -> ResourceDescriptor:
    relations = {"student": student.id}
    if student.class_id:
        relations["class"] = student.class_id
    return ResourceDescriptor(
        resource_type=RESOURCE_STUDENTS,
        school_id=student.school_id,
        owner_ids_by_relation=relations,
    )


def describe_grade(grade: Grade) -> ResourceDescriptor:
    return ResourceDescriptor(
        resource_type=RESOURCE_GRADES,
        school_id=grade.school_id,
        owner_ids_by_relation={"student": grade.student_id},
    )


def describe_user(user: User) -> ResourceDescriptor:
    return ResourceDescriptor(resource_type=RESOURCE_USERS, owner_ids_by_relation={"owner": user.id})


# --- Row loaders for the sample controllers ---

async def get_student(session: AsyncSession, student_id: str) -> Student | None:
    return await session.get(Student, student_id)


async def get_grades_for_student(session: AsyncSession, student_id: str) -> list[Grade]:
    r = await session.execute(
        select(Grade).where(Grade.student_id == student_id).order_by(Grade.subject)
    )
    return list(r.scalars().all())


async def get_user(session: AsyncSession, user_id: str) -> User | None:
    return await session.get(User, user_id)
