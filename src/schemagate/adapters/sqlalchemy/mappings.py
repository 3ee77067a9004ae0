"""SQLAlchemy table metadata and imperative mappings for the gate's entities."""

from __future__ import annotations

import logging
import uuid
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    Uuid,
    func,
    orm,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import configure_mappers, relationship

from schemagate.domain.failures import ProgrammingFault, RegistryError
from schemagate.domain.model import (
    Course,
    CourseStatus,
    Degree,
    DegreeLevel,
    Department,
    Message,
    User,
    UserRole,
)

if TYPE_CHECKING:
    from enum import StrEnum

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


def enum_type(enum_class: type[StrEnum], table: str, column: str) -> Enum:
    """Named enum type; Postgres creates it as ``CREATE TYPE enum_<table>_<column>``."""

    return Enum(
        enum_class,
        name=f"enum_{table}_{column}",
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


def _timestamps() -> tuple[Column[object], Column[object]]:
    return (
        Column("created_at", DateTime(timezone=True), nullable=True, server_default=func.now()),
        Column("updated_at", DateTime(timezone=True), nullable=True, server_default=func.now()),
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

department_table = Table(
    "departments",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String(255), nullable=False),
    Column("code", String(32), nullable=False, unique=True),
    Column("description", Text, nullable=True),
    *_timestamps(),
)

user_table = Table(
    "users",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("email", String(255), nullable=False, unique=True),
    Column("display_name", String(255), nullable=False),
    Column("role", enum_type(UserRole, "users", "role"), nullable=False),
    Column("password_hash", String(255), nullable=True),
    Column(
        "department_id",
        UUIDColumnType,
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    ),
    *_timestamps(),
)

degree_table = Table(
    "degrees",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("title", String(255), nullable=False),
    Column("level", enum_type(DegreeLevel, "degrees", "level"), nullable=False),
    Column("credits_required", Integer, nullable=True),
    Column(
        "department_id",
        UUIDColumnType,
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=True,
    ),
    *_timestamps(),
)

course_table = Table(
    "courses",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("code", String(32), nullable=False, unique=True),
    Column("title", String(255), nullable=False),
    Column("credits", Integer, nullable=False, default=0),
    Column("status", enum_type(CourseStatus, "courses", "status"), nullable=False),
    Column(
        "department_id",
        UUIDColumnType,
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=True,
    ),
    Column(
        "teacher_id",
        UUIDColumnType,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    ),
    *_timestamps(),
)

course_enrollment_table = Table(
    "course_enrollments",
    mapper_registry.metadata,
    Column(
        "course_id", UUIDColumnType, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "user_id", UUIDColumnType, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    ),
    Column("enrolled_at", DateTime(timezone=True), nullable=True, server_default=func.now()),
)

message_table = Table(
    "messages",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("subject", String(255), nullable=False),
    Column("body", Text, nullable=False),
    Column("read", Boolean, nullable=False, default=False),
    Column(
        "sender_id", UUIDColumnType, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    ),
    Column(
        "recipient_id", UUIDColumnType, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    ),
    *_timestamps(),
)

TABLE_BY_ENTITY: Final[dict[str, Table]] = {
    "User": user_table,
    "Department": department_table,
    "Course": course_table,
    "Degree": degree_table,
    "Message": message_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers (and their relationships) for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        Department,
        department_table,
        properties={
            "courses": relationship(Course, back_populates="department"),
            "degrees": relationship(Degree, back_populates="department"),
            "members": relationship(User, back_populates="department"),
        },
    )

    mapper_registry.map_imperatively(
        User,
        user_table,
        properties={
            "department": relationship(Department, back_populates="members"),
            "taught_courses": relationship(
                Course,
                back_populates="teacher",
                foreign_keys=[course_table.c.teacher_id],
            ),
            "enrolled_courses": relationship(
                Course,
                secondary=course_enrollment_table,
                back_populates="students",
            ),
            "sent_messages": relationship(
                Message,
                back_populates="sender",
                foreign_keys=[message_table.c.sender_id],
            ),
            "received_messages": relationship(
                Message,
                back_populates="recipient",
                foreign_keys=[message_table.c.recipient_id],
            ),
        },
    )

    mapper_registry.map_imperatively(
        Degree,
        degree_table,
        properties={
            "department": relationship(Department, back_populates="degrees"),
        },
    )

    mapper_registry.map_imperatively(
        Course,
        course_table,
        properties={
            "department": relationship(Department, back_populates="courses"),
            "teacher": relationship(
                User,
                back_populates="taught_courses",
                foreign_keys=[course_table.c.teacher_id],
            ),
            "students": relationship(
                User,
                secondary=course_enrollment_table,
                back_populates="enrolled_courses",
            ),
        },
    )

    mapper_registry.map_imperatively(
        Message,
        message_table,
        properties={
            "sender": relationship(
                User,
                back_populates="sent_messages",
                foreign_keys=[message_table.c.sender_id],
            ),
            "recipient": relationship(
                User,
                back_populates="received_messages",
                foreign_keys=[message_table.c.recipient_id],
            ),
        },
    )

    configure_mappers()
    return mapper_registry


def initialize_associations() -> orm.registry:
    """Wire entity relationships, reporting mapping mistakes as registry errors."""

    try:
        return start_mappers()
    except SQLAlchemyError as exc:
        raise RegistryError(
            ProgrammingFault(message=f"Association setup failed: {exc}")
        ) from exc
