# EduFam Access database
from .models import (
    Base,
    School,
    User,
    SchoolClass,
    Student,
    Enrollment,
    TeacherAssignment,
    Grade,
    DirectorSchoolAccess,
    DirectorActiveContext,
    SchoolSwitchAudit,
)
from .database import get_db, init_db

__all__ = [
    "Base",
    "School",
    "User",
    "SchoolClass",
    "Student",
    "Enrollment",
    "TeacherAssignment",
    "Grade",
    "DirectorSchoolAccess",
    "DirectorActiveContext",
    "SchoolSwitchAudit",
    "get_db",
    "init_db",
]
