"""Domain value types — identities, roles, pending registrations.

Learn: An identity is always one of three concrete variants (Student,
Teacher, Admin) sharing the User shape. The variant IS the role: each
class carries a `role` class attribute, and the storage layer hands back
the right variant for the collection it read from. Code that only needs
the shared fields (id, email, pass_hash) works on any of them without
inspecting the type.

Admin is normalised into the shared shape: its profile fields exist but
default to empty strings.
"""

import base64
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Union

from sso.errors import RoleNotExists


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: "str | Role", op: str = "role.parse") -> "Role":
        """Return the Role for `value` or raise RoleNotExists."""
        try:
            return cls(value)
        except ValueError:
            raise RoleNotExists(op, f"role does not exist: {value!r}") from None


@dataclass(frozen=True)
class BirthDate:
    """Calendar date as three plain fields; no calendar validation."""

    year: int = 0
    month: int = 0
    day: int = 0

    def to_dict(self) -> dict:
        return {"year": self.year, "month": self.month, "day": self.day}

    @classmethod
    def from_dict(cls, data: dict | None) -> "BirthDate":
        data = data or {}
        return cls(
            year=int(data.get("year", 0)),
            month=int(data.get("month", 0)),
            day=int(data.get("day", 0)),
        )


@dataclass
class Profile:
    """Registration input: who the person is plus their plain password."""

    email: str
    password: str
    name: str = ""
    surname: str = ""
    middle_name: str = ""
    phone_number: str = ""
    birth_date: BirthDate = field(default_factory=BirthDate)


# ─── Identities ──────────────────────────────────────────


@dataclass(kw_only=True)
class User:
    """Fields shared by every identity variant."""

    role: ClassVar[Role]

    id: int = 0
    email: str
    pass_hash: bytes = field(default=b"", repr=False)
    name: str = ""
    surname: str = ""
    middle_name: str = ""
    phone_number: str = ""
    birth_date: BirthDate = field(default_factory=BirthDate)


@dataclass(kw_only=True)
class Student(User):
    role: ClassVar[Role] = Role.STUDENT

    group: str = ""
    student_number: str = ""


@dataclass(kw_only=True)
class Teacher(User):
    role: ClassVar[Role] = Role.TEACHER

    title: str = ""
    department: str = ""
    degree: str = ""


@dataclass(kw_only=True)
class Admin(User):
    role: ClassVar[Role] = Role.ADMIN


Identity = Union[Student, Teacher, Admin]

IDENTITY_TYPES: dict[Role, type[User]] = {
    Role.STUDENT: Student,
    Role.TEACHER: Teacher,
    Role.ADMIN: Admin,
}

# Role-specific attributes a pending registration may carry in `meta`
ROLE_META_KEYS: dict[Role, tuple[str, ...]] = {
    Role.STUDENT: ("group", "student_number"),
    Role.TEACHER: ("title", "department", "degree"),
    Role.ADMIN: (),
}


# ─── Pending registrations ───────────────────────────────


def new_pending_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(kw_only=True)
class PendingUser:
    """A submitted-but-unapproved account request.

    Learn: Role-specific fields live in `meta` (string → string) until
    approval, when to_identity() builds the role-typed record. The
    record serialises to plain JSON for Redis; the bcrypt hash is
    base64-encoded because JSON has no bytes type.
    """

    id: str = field(default_factory=new_pending_id)
    email: str
    pass_hash: bytes = field(default=b"", repr=False)
    name: str = ""
    surname: str = ""
    middle_name: str = ""
    phone_number: str = ""
    birth_date: BirthDate = field(default_factory=BirthDate)
    role: Role
    meta: dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    expires_at: datetime | None = None

    def to_identity(self) -> Identity:
        """Build the permanent identity this request asks for."""
        cls = IDENTITY_TYPES[self.role]
        extra = {key: self.meta.get(key, "") for key in ROLE_META_KEYS[self.role]}
        return cls(
            email=self.email,
            pass_hash=self.pass_hash,
            name=self.name,
            surname=self.surname,
            middle_name=self.middle_name,
            phone_number=self.phone_number,
            birth_date=self.birth_date,
            **extra,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "pass_hash": base64.b64encode(self.pass_hash).decode("ascii"),
            "name": self.name,
            "surname": self.surname,
            "middle_name": self.middle_name,
            "phone_number": self.phone_number,
            "birth_date": self.birth_date.to_dict(),
            "role": self.role.value,
            "meta": dict(self.meta),
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingUser":
        expires_at = data.get("expires_at")
        return cls(
            id=data["id"],
            email=data["email"],
            pass_hash=base64.b64decode(data.get("pass_hash", "")),
            name=data.get("name", ""),
            surname=data.get("surname", ""),
            middle_name=data.get("middle_name", ""),
            phone_number=data.get("phone_number", ""),
            birth_date=BirthDate.from_dict(data.get("birth_date")),
            role=Role(data["role"]),
            meta={str(k): str(v) for k, v in (data.get("meta") or {}).items()},
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )
