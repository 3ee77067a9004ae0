from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateTable

from schemagate.adapters.sqlalchemy import (
    SqlAlchemySchemaSynchronizer,
    initialize_associations,
    mapper_registry,
    start_mappers,
)
from schemagate.adapters.sqlalchemy.mappings import course_enrollment_table, user_table
from schemagate.domain.model import (
    Course,
    CourseStatus,
    Department,
    Message,
    User,
    UserRole,
)

if TYPE_CHECKING:
    from sqlalchemy import Enum
    from sqlalchemy.engine import Connection


def test_start_mappers_is_idempotent() -> None:
    assert start_mappers() is start_mappers()
    assert initialize_associations() is mapper_registry


def test_enum_types_follow_naming_scheme() -> None:
    enum_names = {
        column.type.name
        for table in mapper_registry.metadata.tables.values()
        for column in table.columns
        if hasattr(column.type, "enums")
    }

    assert enum_names == {"enum_users_role", "enum_degrees_level", "enum_courses_status"}


def test_enum_values_are_stored_lowercase() -> None:
    role_type: Enum = user_table.c.role.type  # type: ignore[assignment]

    assert role_type.enums == [role.value for role in UserRole]


def test_postgres_ddl_references_named_enum_type() -> None:
    ddl = str(CreateTable(user_table).compile(dialect=postgresql.dialect()))

    assert "role enum_users_role NOT NULL" in ddl


def test_relationships_are_wired_both_ways() -> None:
    start_mappers()
    physics = Department(name="Physics", code="PHY")
    teacher = User(email="marie@example.edu", display_name="Marie", role=UserRole.TEACHER)
    student = User(email="pierre@example.edu", display_name="Pierre")

    course = Course(code="PHY-101", title="Mechanics", department=physics, teacher=teacher)
    course.students.append(student)
    note = Message(subject="Welcome", body="See you Monday", sender=teacher, recipient=student)

    assert physics.courses == [course]
    assert teacher.taught_courses == [course]
    assert student.enrolled_courses == [course]
    assert teacher.sent_messages == [note]
    assert student.received_messages == [note]


def test_entity_graph_persists(sqlite_connection: Connection) -> None:
    SqlAlchemySchemaSynchronizer().synchronize(
        sqlite_connection, allow_alter=False, allow_drop=False
    )
    department = Department(name="Mathematics", code="MAT")
    teacher = User(email="emmy@example.edu", display_name="Emmy", role=UserRole.TEACHER)
    course = Course(
        code="MAT-201",
        title="Algebra",
        status=CourseStatus.ACTIVE,
        department=department,
        teacher=teacher,
    )
    course.students.append(User(email="olga@example.edu", display_name="Olga"))

    with Session(bind=sqlite_connection) as session:
        session.add(course)
        session.commit()

        stored = session.scalars(select(Course).where(Course.code == "MAT-201")).one()
        assert stored.teacher is not None
        assert stored.teacher.email == "emmy@example.edu"
        assert stored.status is CourseStatus.ACTIVE
        assert [user.display_name for user in stored.students] == ["Olga"]
        enrollments = session.scalar(select(func.count()).select_from(course_enrollment_table))
        assert enrollments == 1
