"""Storage interfaces the Auth service depends on.

Learn: Implement IdentityStore for durable identities and PendingStore
for TTL-backed registration requests. The service never imports a
concrete store; sql.py, redis.py and memory.py are interchangeable.

Retry policy, if any, belongs in the implementations.
"""

from abc import ABC, abstractmethod

from sso.domain.models import Admin, PendingUser, Role, Student, Teacher


class IdentityStore(ABC):
    """Durable, role-scoped identities.

    Uniqueness is per (email, role); ids are unique across all roles.
    """

    # ─── Save ─────────────────────────────────────────────

    @abstractmethod
    async def save_student(self, student: Student) -> int:
        """Persist a student and return its id. Raises UserExistsError."""

    @abstractmethod
    async def save_teacher(self, teacher: Teacher) -> int:
        """Persist a teacher and return its id. Raises UserExistsError."""

    @abstractmethod
    async def save_admin(self, admin: Admin) -> int:
        """Persist an admin and return its id. Raises UserExistsError."""

    # ─── Find by email ────────────────────────────────────

    @abstractmethod
    async def student(self, email: str) -> Student:
        """Raises UserNotFoundError or UserHasAnotherRoleError."""

    @abstractmethod
    async def teacher(self, email: str) -> Teacher:
        """Raises UserNotFoundError or UserHasAnotherRoleError."""

    @abstractmethod
    async def admin(self, email: str) -> Admin:
        """Raises UserNotFoundError or UserHasAnotherRoleError."""

    # ─── Lists ────────────────────────────────────────────

    @abstractmethod
    async def list_students(self) -> list[Student]: ...

    @abstractmethod
    async def list_teachers(self) -> list[Teacher]: ...

    @abstractmethod
    async def list_admins(self) -> list[Admin]: ...

    # ─── Membership ───────────────────────────────────────

    @abstractmethod
    async def is_student(self, user_id: int) -> bool:
        """Raises UserNotFoundError for an unknown id."""

    @abstractmethod
    async def is_teacher(self, user_id: int) -> bool:
        """Raises UserNotFoundError for an unknown id."""

    @abstractmethod
    async def is_admin(self, user_id: int) -> bool:
        """Raises UserNotFoundError for an unknown id."""

    # ─── Delete ───────────────────────────────────────────

    @abstractmethod
    async def delete_user(self, user_id: int, role: Role) -> None:
        """Raises UserNotFoundError or UserDontHaveRoleError."""


class PendingStore(ABC):
    """Ephemeral registration requests that expire on their own."""

    @abstractmethod
    async def save(self, pending: PendingUser) -> str:
        """Store with the configured TTL; sets expires_at and returns the id."""

    @abstractmethod
    async def get(self, pending_id: str) -> PendingUser:
        """Raises NoValueForKeyError when missing or expired."""

    @abstractmethod
    async def list_all(self) -> list[PendingUser]:
        """All live records, in no particular order."""

    @abstractmethod
    async def delete(self, pending_id: str) -> None:
        """Delete-if-present. Raises NoValueForKeyError when absent."""

    @abstractmethod
    async def take(self, pending_id: str) -> PendingUser:
        """Atomically read and remove a record.

        Of two concurrent callers for the same id, exactly one gets the
        record; the other gets NoValueForKeyError.
        """

    @abstractmethod
    async def restore(self, pending: PendingUser) -> None:
        """Put a taken record back for whatever lifetime it had left."""
