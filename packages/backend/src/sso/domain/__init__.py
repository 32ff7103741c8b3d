"""Domain value types."""

from sso.domain.models import (
    Admin,
    BirthDate,
    Identity,
    PendingUser,
    Profile,
    Role,
    Student,
    Teacher,
    User,
)

__all__ = [
    "Admin",
    "BirthDate",
    "Identity",
    "PendingUser",
    "Profile",
    "Role",
    "Student",
    "Teacher",
    "User",
]
