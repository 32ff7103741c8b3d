"""In-memory stores for development and tests.

Learn: Same contracts as the SQL and Redis stores, backed by dicts.
Pending records expire lazily: anything past its expires_at is dropped
the next time it is looked at, which matches what a Redis TTL looks
like from the outside. The clock is injectable so tests can move time
forward without sleeping.

Not shared between processes; use only for single-process runs.
"""

import copy
import itertools
from datetime import datetime, timedelta
from typing import Callable

from sso.domain.models import (
    Admin,
    PendingUser,
    Role,
    Student,
    Teacher,
    User,
    utcnow,
)
from sso.storage import (
    NoValueForKeyError,
    UserDontHaveRoleError,
    UserExistsError,
    UserHasAnotherRoleError,
    UserNotFoundError,
)
from sso.storage.base import IdentityStore, PendingStore


class MemoryIdentityStore(IdentityStore):
    def __init__(self):
        self._users: dict[int, User] = {}
        self._ids = itertools.count(1)

    async def _save(self, user: User) -> int:
        for existing in self._users.values():
            if existing.role is user.role and existing.email == user.email:
                raise UserExistsError(f"{user.role.value} {user.email} already exists")
        stored = copy.deepcopy(user)
        stored.id = next(self._ids)
        self._users[stored.id] = stored
        return stored.id

    async def _find(self, role: Role, email: str) -> User:
        other_role = False
        for user in self._users.values():
            if user.email != email:
                continue
            if user.role is role:
                return copy.deepcopy(user)
            other_role = True
        if other_role:
            raise UserHasAnotherRoleError(f"{email} is not a {role.value}")
        raise UserNotFoundError(email)

    def _of_role(self, role: Role) -> list:
        return [copy.deepcopy(u) for u in self._users.values() if u.role is role]

    def _get(self, user_id: int) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    async def save_student(self, student: Student) -> int:
        return await self._save(student)

    async def save_teacher(self, teacher: Teacher) -> int:
        return await self._save(teacher)

    async def save_admin(self, admin: Admin) -> int:
        return await self._save(admin)

    async def student(self, email: str) -> Student:
        return await self._find(Role.STUDENT, email)

    async def teacher(self, email: str) -> Teacher:
        return await self._find(Role.TEACHER, email)

    async def admin(self, email: str) -> Admin:
        return await self._find(Role.ADMIN, email)

    async def list_students(self) -> list[Student]:
        return self._of_role(Role.STUDENT)

    async def list_teachers(self) -> list[Teacher]:
        return self._of_role(Role.TEACHER)

    async def list_admins(self) -> list[Admin]:
        return self._of_role(Role.ADMIN)

    async def is_student(self, user_id: int) -> bool:
        return self._get(user_id).role is Role.STUDENT

    async def is_teacher(self, user_id: int) -> bool:
        return self._get(user_id).role is Role.TEACHER

    async def is_admin(self, user_id: int) -> bool:
        return self._get(user_id).role is Role.ADMIN

    async def delete_user(self, user_id: int, role: Role) -> None:
        user = self._get(user_id)
        if user.role is not role:
            raise UserDontHaveRoleError(f"user {user_id} is not a {role.value}")
        del self._users[user_id]


class MemoryPendingStore(PendingStore):
    def __init__(
        self,
        ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ttl = ttl
        self.clock = clock
        self._data: dict[str, PendingUser] = {}

    def _live(self, pending_id: str) -> PendingUser:
        rec = self._data.get(pending_id)
        if rec is None:
            raise NoValueForKeyError(pending_id)
        if rec.expires_at is not None and rec.expires_at <= self.clock():
            del self._data[pending_id]
            raise NoValueForKeyError(pending_id)
        return rec

    async def save(self, pending: PendingUser) -> str:
        stored = copy.deepcopy(pending)
        stored.expires_at = self.clock() + self.ttl
        self._data[stored.id] = stored
        pending.expires_at = stored.expires_at
        return stored.id

    async def get(self, pending_id: str) -> PendingUser:
        return copy.deepcopy(self._live(pending_id))

    async def list_all(self) -> list[PendingUser]:
        live = []
        for pending_id in list(self._data):
            try:
                live.append(copy.deepcopy(self._live(pending_id)))
            except NoValueForKeyError:
                continue
        return live

    async def delete(self, pending_id: str) -> None:
        self._live(pending_id)
        del self._data[pending_id]

    async def take(self, pending_id: str) -> PendingUser:
        rec = self._live(pending_id)
        del self._data[pending_id]
        return rec

    async def restore(self, pending: PendingUser) -> None:
        if pending.expires_at is not None and pending.expires_at <= self.clock():
            return
        self._data[pending.id] = copy.deepcopy(pending)
