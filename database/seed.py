# EduFam Access - seed database with sample tenants, grants and links
import asyncio

from sqlalchemy import select

from . import database
from .models import (
    DirectorSchoolAccess,
    Enrollment,
    Grade,
    School,
    SchoolClass,
    Student,
    TeacherAssignment,
    User,
)


async def seed(database_url: str | None = None):
    await database.init_db(database_url)
    async with database.async_session() as session:
        # Check if already seeded
        r = await session.execute(select(User).limit(1))
        if r.scalar_one_or_none():
            print("Database already seeded. Skip.")
            return

        # Schools: two under one director, one unrelated tenant
        north = School(name="Northgate Academy")
        south = School(name="Southbank School")
        east = School(name="Eastfield College")
        session.add_all([north, south, east])
        await session.flush()

        admin = User(username="superadmin", role="super_admin", full_name="Platform Owner")
        engineer = User(username="engineer", role="engineer", full_name="Ops Engineer")
        director = User(username="director", role="school_director", school_id=north.id, full_name="Dana Director")
        principal = User(username="principal", role="principal", school_id=north.id, full_name="Paul Principal")
        teacher = User(username="teacher", role="teacher", school_id=north.id, full_name="Tess Teacher")
        parent = User(username="parent", role="parent", school_id=south.id, full_name="Pat Parent")
        outsider = User(username="east_hr", role="hr", school_id=east.id, full_name="Eve HR")
        session.add_all([admin, engineer, director, principal, teacher, parent, outsider])
        await session.flush()

        # Classes and rosters
        n1 = SchoolClass(school_id=north.id, name="Grade 7 Blue")
        n2 = SchoolClass(school_id=north.id, name="Grade 8 Red")
        session.add_all([n1, n2])
        await session.flush()
        s1 = Student(school_id=north.id, class_id=n1.id, full_name="Amy Achieng", admission_number="N-001")
        s2 = Student(school_id=north.id, class_id=n1.id, full_name="Ben Baraka", admission_number="N-002")
        s3 = Student(school_id=north.id, class_id=n2.id, full_name="Cy Chebet", admission_number="N-003")
        session.add_all([s1, s2, s3])
        await session.flush()

        # Director reaches Northgate and Southbank through grants only
        session.add_all([
            DirectorSchoolAccess(director_id=director.id, school_id=north.id, access_level="full",
                                 granted_by=admin.id, access_reason="Home school"),
            DirectorSchoolAccess(director_id=director.id, school_id=south.id, access_level="read_only",
                                 granted_by=admin.id, access_reason="Oversight"),
        ])

        # Parent (registered at Southbank) has a child at Northgate
        session.add(Enrollment(parent_id=parent.id, student_id=s1.id, school_id=north.id))
        # Teacher takes Grade 7 Blue
        session.add(TeacherAssignment(teacher_id=teacher.id, class_id=n1.id))

        session.add_all([
            Grade(student_id=s1.id, school_id=north.id, subject="Mathematics", score=81.0, grade_value="A"),
            Grade(student_id=s1.id, school_id=north.id, subject="English", score=68.0, grade_value="B"),
            Grade(student_id=s2.id, school_id=north.id, subject="Mathematics", score=74.0, grade_value="B+"),
            Grade(student_id=s3.id, school_id=north.id, subject="Science", score=59.0, grade_value="C"),
        ])
        await session.commit()

        from auth import create_dev_token
        print("Seed completed. Development tokens:")
        for user in (admin, engineer, director, principal, teacher, parent, outsider):
            print(f"  {user.username:<11} {user.role:<16} {create_dev_token(user, expires_minutes=24 * 60)}")


if __name__ == "__main__":
    asyncio.run(seed())
