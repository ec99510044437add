# EduFam Access - database models
import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

from access.clock import utcnow

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class School(Base):
    __tablename__ = "schools"
    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<School(id={self.id}, name={self.name})>"


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(64), unique=True, nullable=False, index=True)
    role = Column(String(32), nullable=False)
    school_id = Column(String(36), ForeignKey("schools.id"), nullable=True)
    full_name = Column(String(128), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"


class SchoolClass(Base):
    __tablename__ = "classes"
    id = Column(String(36), primary_key=True, default=_uuid)
    school_id = Column(String(36), ForeignKey("schools.id"), nullable=False, index=True)
    name = Column(String(128), nullable=False)


class Student(Base):
    __tablename__ = "students"
    id = Column(String(36), primary_key=True, default=_uuid)
    school_id = Column(String(36), ForeignKey("schools.id"), nullable=False, index=True)
    # Current roster: a student sits in at most one class at a time
    class_id = Column(String(36), ForeignKey("classes.id"), nullable=True, index=True)
    full_name = Column(String(128), nullable=False)
    admission_number = Column(String(32), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    class_ = relationship("SchoolClass", backref="roster")


# Parent <-> child link
class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("parent_id", "student_id"),)
    id = Column(String(36), primary_key=True, default=_uuid)
    parent_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False)
    school_id = Column(String(36), ForeignKey("schools.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)


# Teacher <-> class link
class TeacherAssignment(Base):
    __tablename__ = "teacher_assignments"
    __table_args__ = (UniqueConstraint("teacher_id", "class_id"),)
    id = Column(String(36), primary_key=True, default=_uuid)
    teacher_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    class_id = Column(String(36), ForeignKey("classes.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Grade(Base):
    __tablename__ = "grades"
    id = Column(String(36), primary_key=True, default=_uuid)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    school_id = Column(String(36), ForeignKey("schools.id"), nullable=False)
    subject = Column(String(64), nullable=False)
    score = Column(Float, nullable=True)
    grade_value = Column(String(4), nullable=True)
    created_at = Column(DateTime, default=utcnow)


class DirectorSchoolAccess(Base):
    __tablename__ = "director_school_access"
    __table_args__ = (UniqueConstraint("director_id", "school_id"),)
    id = Column(String(36), primary_key=True, default=_uuid)
    director_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    school_id = Column(String(36), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False, index=True)
    access_level = Column(String(20), nullable=False, default="full")
    granted_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    granted_at = Column(DateTime, default=utcnow)
    is_active = Column(Boolean, default=True, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    access_reason = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return (f"<DirectorSchoolAccess(director_id={self.director_id}, school_id={self.school_id}, "
                f"is_active={self.is_active})>")


class DirectorActiveContext(Base):
    __tablename__ = "director_active_contexts"
    id = Column(String(36), primary_key=True, default=_uuid)
    director_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    active_school_id = Column(String(36), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    previous_school_id = Column(String(36), ForeignKey("schools.id"), nullable=True)
    switch_reason = Column(Text, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    last_switched_at = Column(DateTime, default=utcnow)


class SchoolSwitchAudit(Base):
    __tablename__ = "school_switch_audit"
    id = Column(String(36), primary_key=True, default=_uuid)
    director_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    from_school_id = Column(String(36), ForeignKey("schools.id"), nullable=True)
    to_school_id = Column(String(36), ForeignKey("schools.id"), nullable=False)
    session_id = Column(String(255), nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    switch_reason = Column(Text, nullable=True)
    switch_timestamp = Column(DateTime, default=utcnow)
