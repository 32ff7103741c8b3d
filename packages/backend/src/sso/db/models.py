"""SQLAlchemy ORM models — single source of truth for the identity schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] +
mapped_column) using joined-table inheritance:

    users      — shared identity fields + the `role` discriminator
    students   — group, student_number        (FK → users.id)
    teachers   — title, department, degree    (FK → users.id)
    admins     — nothing extra                (FK → users.id)

Ids come from one sequence (users.id), so an id names exactly one
identity whatever its role. Emails are unique per role, not globally:
the same person may hold a student and a teacher account.
"""

from datetime import datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class UserRecord(Base):
    """Fields every identity has, whatever its role."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", "role", name="uq_users_email_role"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    pass_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    surname: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    middle_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    birth_year: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    birth_month: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    birth_day: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __mapper_args__ = {"polymorphic_on": "role"}


class StudentRecord(UserRecord):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    group: Mapped[str] = mapped_column("group_name", String(50), nullable=False, default="")
    student_number: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    __mapper_args__ = {"polymorphic_identity": "student"}


class TeacherRecord(UserRecord):
    __tablename__ = "teachers"

    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    department: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    degree: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    __mapper_args__ = {"polymorphic_identity": "teacher"}


class AdminRecord(UserRecord):
    __tablename__ = "admins"

    id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )

    __mapper_args__ = {"polymorphic_identity": "admin"}
