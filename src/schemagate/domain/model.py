"""Entities whose tables the gate creates and verifies.

These are plain dataclasses; persistence is attached imperatively by the
SQLAlchemy adapter so the domain stays free of ORM imports.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from enum import StrEnum


class UserRole(StrEnum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class DegreeLevel(StrEnum):
    BACHELOR = "bachelor"
    MASTER = "master"
    DOCTORATE = "doctorate"


class CourseStatus(StrEnum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(eq=False, kw_only=True)
class Entity:
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Department(Entity):
    name: str
    code: str
    description: str | None = None

    courses: list[Course] = field(default_factory=list["Course"], repr=False)
    degrees: list[Degree] = field(default_factory=list["Degree"], repr=False)
    members: list[User] = field(default_factory=list["User"], repr=False)


@dataclass(eq=False, kw_only=True)
class User(Entity):
    email: str
    display_name: str
    role: UserRole = UserRole.STUDENT
    password_hash: str | None = field(default=None, repr=False)

    department: Department | None = field(default=None, repr=False)
    taught_courses: list[Course] = field(default_factory=list["Course"], repr=False)
    enrolled_courses: list[Course] = field(default_factory=list["Course"], repr=False)
    sent_messages: list[Message] = field(default_factory=list["Message"], repr=False)
    received_messages: list[Message] = field(default_factory=list["Message"], repr=False)


@dataclass(eq=False, kw_only=True)
class Degree(Entity):
    title: str
    level: DegreeLevel
    department: Department | None = field(default=None, repr=False)
    credits_required: int | None = None


@dataclass(eq=False, kw_only=True)
class Course(Entity):
    code: str
    title: str
    credits: int = 0
    status: CourseStatus = CourseStatus.DRAFT

    department: Department | None = field(default=None, repr=False)
    teacher: User | None = field(default=None, repr=False)
    students: list[User] = field(default_factory=list["User"], repr=False)


@dataclass(eq=False, kw_only=True)
class Message(Entity):
    subject: str
    body: str
    read: bool = False

    sender: User | None = field(default=None, repr=False)
    recipient: User | None = field(default=None, repr=False)
