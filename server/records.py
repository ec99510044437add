# EduFam Access - sample resource controllers gated by the decision engine
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from access import AccessEngine, Actor, Operation
from auth import require_actor
from database.database import get_db
from server.data_access import (
    describe_grade,
    describe_student,
    describe_user,
    get_grades_for_student,
    get_student,
    get_user,
)
from server.endpoints import get_engine

router = APIRouter(prefix="/api", tags=["Records"])


class StudentUpdate(BaseModel):
    full_name: str | None = None
    admission_number: str | None = None


def _student_out(student) -> dict:
    return {
        "id": student.id,
        "school_id": student.school_id,
        "class_id": student.class_id,
        "full_name": student.full_name,
        "admission_number": student.admission_number,
    }


async def _load_student(db: AsyncSession, student_id: str):
    student = await get_student(db, student_id)
    if student is None:
        # Missing rows answer exactly like denials
        raise HTTPException(status_code=403, detail="Access denied")
    return student


@router.get("/students/{student_id}")
async def read_student(
    student_id: str,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    engine: AccessEngine = Depends(get_engine),
):
    student = await _load_student(db, student_id)
    await engine.ensure(actor, describe_student(student), Operation.READ)
    return _student_out(student)


@router.patch("/students/{student_id}")
async def update_student(
    student_id: str,
    body: StudentUpdate,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    engine: AccessEngine = Depends(get_engine),
):
    student = await _load_student(db, student_id)
    await engine.ensure(actor, describe_student(student), Operation.UPDATE)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(student, field, value)
    await db.flush()
    return _student_out(student)


@router.get("/students/{student_id}/grades")
async def read_student_grades(
    student_id: str,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    engine: AccessEngine = Depends(get_engine),
):
    """Row-level: each grade is decided on its own descriptor; denied rows are dropped."""
    student = await _load_student(db, student_id)
    await engine.ensure(actor, describe_student(student), Operation.READ)
    visible = []
    for grade in await get_grades_for_student(db, student_id):
        decision = await engine.can_access(actor, describe_grade(grade), Operation.READ)
        if decision.allowed:
            visible.append({"subject": grade.subject, "score": grade.score, "grade": grade.grade_value})
    return {"student_id": student_id, "grades": visible}


@router.get("/users/{user_id}")
async def read_user(
    user_id: str,
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
    engine: AccessEngine = Depends(get_engine),
):
    user = await get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=403, detail="Access denied")
    await engine.ensure(actor, describe_user(user), Operation.READ)
    return {"id": user.id, "username": user.username, "role": user.role, "full_name": user.full_name}
