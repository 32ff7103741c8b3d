"""Auth service — login, registration workflow, role queries.

Learn: This is the only layer with decisions in it. API routes and CLI
commands call it; it calls two stores (identities, pending requests),
the password hasher and the token issuer, and nothing else.

Three rules hold for every operation:
1. Storage errors never leave as-is. Expected ones are translated into
   the domain taxonomy (sso.errors); anything else becomes
   StorageFailure tagged with the operation name. Nothing is retried.
2. Credential failures are normalised: unknown email and wrong
   password are both InvalidCredentials.
3. The service holds no state of its own. Its logger is injected and
   bound per operation; it is never reconfigured here.

Roles dispatch through dicts of store methods keyed by Role, so adding
a role means adding a key, not another if/elif ladder.

Hashing is CPU-bound and deliberately slow, so it runs in a worker
thread. Cancellation (asyncio.CancelledError) and caller deadlines pass
straight through: they are BaseExceptions, and only Exception is
caught below.
"""

import asyncio
from datetime import timedelta
from typing import Optional

import structlog

from sso.auth.jwt import TokenIssuer
from sso.auth.password import PasswordHasher
from sso.domain.models import (
    Admin,
    Identity,
    PendingUser,
    Profile,
    Role,
    Student,
    Teacher,
)
from sso.errors import (
    InvalidCredentials,
    InvalidUserID,
    PendingUserNotFound,
    StorageFailure,
    UserExists,
    UserNotMatchingRole,
)
from sso.storage import (
    NoValueForKeyError,
    UserDontHaveRoleError,
    UserExistsError,
    UserHasAnotherRoleError,
    UserNotFoundError,
)
from sso.storage.base import IdentityStore, PendingStore


def _profile_fields(profile: Profile) -> dict:
    return {
        "email": profile.email,
        "name": profile.name,
        "surname": profile.surname,
        "middle_name": profile.middle_name,
        "phone_number": profile.phone_number,
        "birth_date": profile.birth_date,
    }


class AuthService:
    """Identity and access operations over the two stores."""

    def __init__(
        self,
        identities: IdentityStore,
        pending: PendingStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        token_ttl: timedelta,
        logger: Optional[structlog.typing.FilteringBoundLogger] = None,
    ):
        self.identities = identities
        self.pending = pending
        self.hasher = hasher
        self.tokens = tokens
        self.token_ttl = token_ttl
        self.log = logger or structlog.get_logger()

        self._finders = {
            Role.STUDENT: identities.student,
            Role.TEACHER: identities.teacher,
            Role.ADMIN: identities.admin,
        }
        self._savers = {
            Role.STUDENT: identities.save_student,
            Role.TEACHER: identities.save_teacher,
            Role.ADMIN: identities.save_admin,
        }

    # ─── Login ────────────────────────────────────────────

    async def login(self, email: str, password: str, role: str) -> str:
        """Check credentials for `role` and return a signed session token."""
        op = "auth.login"
        log = self.log.bind(op=op, email=email)
        log.info("auth.login.started")

        # Unknown roles are rejected before storage is touched
        parsed = Role.parse(role, op)

        try:
            user = await self._finders[parsed](email)
        except UserNotFoundError as e:
            log.warning("auth.login.user_not_found")
            raise InvalidCredentials(op) from e
        except UserHasAnotherRoleError as e:
            log.warning("auth.login.another_role", role=parsed.value)
            raise UserNotMatchingRole(op) from e
        except Exception as e:
            log.error("auth.login.lookup_failed", error=str(e))
            raise StorageFailure(op, f"failed to get user: {e}") from e

        if not await asyncio.to_thread(self.hasher.verify, user.pass_hash, password):
            log.warning("auth.login.invalid_password")
            raise InvalidCredentials(op)

        token = self.tokens.issue(user, self.token_ttl, op=op)

        log.info("auth.login.succeeded", user_id=user.id, role=parsed.value)
        return token

    # ─── Pending registrations ────────────────────────────

    async def register_pending(
        self,
        profile: Profile,
        role: str,
        meta: Optional[dict[str, str]] = None,
    ) -> str:
        """Submit a registration request. Returns the pending id.

        Learn: Duplicate submissions for the same email are not
        detected here; the reviewing admin sees both and rejects one.
        """
        op = "auth.register_pending"
        log = self.log.bind(op=op, email=profile.email)

        parsed = Role.parse(role, op)
        pass_hash = await self._hash(profile.password, op)

        pending = PendingUser(
            **_profile_fields(profile),
            pass_hash=pass_hash,
            role=parsed,
            meta={str(k): str(v) for k, v in (meta or {}).items()},
        )
        try:
            pending_id = await self.pending.save(pending)
        except Exception as e:
            log.error("auth.register_pending.save_failed", error=str(e))
            raise StorageFailure(op, f"failed to save pending user: {e}") from e

        log.info("auth.register_pending.saved", pending_id=pending_id, role=parsed.value)
        return pending_id

    async def list_pending(self) -> list[PendingUser]:
        op = "auth.list_pending"
        log = self.log.bind(op=op)

        try:
            users = await self.pending.list_all()
        except Exception as e:
            log.error("auth.list_pending.failed", error=str(e))
            raise StorageFailure(op, f"failed to list pending users: {e}") from e

        log.info("auth.list_pending.listed", count=len(users))
        return users

    async def approve_pending(self, pending_id: str) -> int:
        """Promote a pending request into a permanent identity.

        Learn: The record is taken (read + removed atomically) first, so
        a concurrent approve or reject of the same id sees "not found".
        If creating the identity then fails, the record is put back with
        its remaining lifetime, so a request is never consumed without
        producing an account. Returns the new identity's id.
        """
        op = "auth.approve_pending"
        log = self.log.bind(op=op, pending_id=pending_id)

        try:
            pending = await self.pending.take(pending_id)
        except NoValueForKeyError as e:
            log.warning("auth.approve_pending.not_found")
            raise PendingUserNotFound(op) from e
        except Exception as e:
            log.error("auth.approve_pending.take_failed", error=str(e))
            raise StorageFailure(op, f"failed to get pending user: {e}") from e

        identity = pending.to_identity()
        try:
            user_id = await self._savers[pending.role](identity)
        except UserExistsError as e:
            log.warning("auth.approve_pending.user_exists", email=pending.email)
            await self._restore_pending(pending, log)
            raise UserExists(op) from e
        except asyncio.CancelledError:
            await self._restore_pending(pending, log)
            raise
        except Exception as e:
            log.error("auth.approve_pending.save_failed", error=str(e))
            await self._restore_pending(pending, log)
            raise StorageFailure(op, f"failed to create user: {e}") from e

        log.info(
            "auth.approve_pending.approved",
            user_id=user_id,
            role=pending.role.value,
            email=pending.email,
        )
        return user_id

    async def delete_pending(self, pending_id: str) -> None:
        """Reject a pending request; no identity is created."""
        op = "auth.delete_pending"
        log = self.log.bind(op=op, pending_id=pending_id)

        try:
            await self.pending.delete(pending_id)
        except NoValueForKeyError as e:
            log.warning("auth.delete_pending.not_found")
            raise PendingUserNotFound(op) from e
        except Exception as e:
            log.error("auth.delete_pending.failed", error=str(e))
            raise StorageFailure(op, f"failed to delete pending user: {e}") from e

        log.info("auth.delete_pending.deleted")

    # ─── Permanent registration ───────────────────────────

    async def register_student(
        self,
        profile: Profile,
        group: str = "",
        student_number: str = "",
    ) -> int:
        op = "auth.register_student"
        student = Student(
            **_profile_fields(profile),
            pass_hash=await self._hash(profile.password, op),
            group=group,
            student_number=student_number,
        )
        return await self._save(op, student)

    async def register_teacher(
        self,
        profile: Profile,
        title: str = "",
        department: str = "",
        degree: str = "",
    ) -> int:
        op = "auth.register_teacher"
        teacher = Teacher(
            **_profile_fields(profile),
            pass_hash=await self._hash(profile.password, op),
            title=title,
            department=department,
            degree=degree,
        )
        return await self._save(op, teacher)

    async def register_admin(self, profile: Profile) -> int:
        """Register an admin. Only email and password are required."""
        op = "auth.register_admin"
        admin = Admin(
            **_profile_fields(profile),
            pass_hash=await self._hash(profile.password, op),
        )
        return await self._save(op, admin)

    # ─── Deletion ─────────────────────────────────────────

    async def delete_user(self, user_id: int, role: str) -> None:
        op = "auth.delete_user"
        log = self.log.bind(op=op, user_id=user_id)

        parsed = Role.parse(role, op)
        try:
            await self.identities.delete_user(user_id, parsed)
        except UserNotFoundError as e:
            log.warning("auth.delete_user.not_found")
            raise InvalidCredentials(op) from e
        except UserDontHaveRoleError as e:
            log.warning("auth.delete_user.another_role", role=parsed.value)
            raise UserNotMatchingRole(op) from e
        except Exception as e:
            log.error("auth.delete_user.failed", error=str(e))
            raise StorageFailure(op, f"failed to delete user: {e}") from e

        log.info("auth.delete_user.deleted", role=parsed.value)

    # ─── Role membership ──────────────────────────────────

    async def is_admin(self, user_id: int) -> bool:
        return await self._check_role("auth.is_admin", Role.ADMIN, user_id)

    async def is_student(self, user_id: int) -> bool:
        return await self._check_role("auth.is_student", Role.STUDENT, user_id)

    async def is_teacher(self, user_id: int) -> bool:
        return await self._check_role("auth.is_teacher", Role.TEACHER, user_id)

    # ─── Lists ────────────────────────────────────────────

    async def list_students(self) -> list[Student]:
        return await self._list("auth.list_students", self.identities.list_students)

    async def list_teachers(self) -> list[Teacher]:
        return await self._list("auth.list_teachers", self.identities.list_teachers)

    async def list_admins(self) -> list[Admin]:
        return await self._list("auth.list_admins", self.identities.list_admins)

    # ─── Helpers ──────────────────────────────────────────

    async def _hash(self, password: str, op: str) -> bytes:
        return await asyncio.to_thread(self.hasher.hash, password, op)

    async def _save(self, op: str, identity: Identity) -> int:
        log = self.log.bind(op=op, email=identity.email)

        try:
            user_id = await self._savers[identity.role](identity)
        except UserExistsError as e:
            log.warning("auth.register.user_exists")
            raise UserExists(op) from e
        except Exception as e:
            log.error("auth.register.save_failed", error=str(e))
            raise StorageFailure(op, f"failed to save user: {e}") from e

        log.info("auth.register.saved", user_id=user_id, role=identity.role.value)
        return user_id

    async def _check_role(self, op: str, role: Role, user_id: int) -> bool:
        log = self.log.bind(op=op, user_id=user_id)
        checks = {
            Role.STUDENT: self.identities.is_student,
            Role.TEACHER: self.identities.is_teacher,
            Role.ADMIN: self.identities.is_admin,
        }

        try:
            result = await checks[role](user_id)
        except UserNotFoundError as e:
            log.warning("auth.role_check.user_not_found")
            raise InvalidUserID(op) from e
        except Exception as e:
            log.error("auth.role_check.failed", error=str(e))
            raise StorageFailure(op, f"failed to check role: {e}") from e

        log.info("auth.role_check.checked", role=role.value, result=result)
        return result

    async def _list(self, op: str, lister) -> list:
        log = self.log.bind(op=op)

        try:
            users = await lister()
        except Exception as e:
            log.error("auth.list.failed", error=str(e))
            raise StorageFailure(op, f"failed to list users: {e}") from e

        log.info("auth.list.listed", count=len(users))
        return users

    async def _restore_pending(self, pending: PendingUser, log) -> None:
        try:
            await self.pending.restore(pending)
        except Exception as e:
            # The original failure is what the caller needs to see
            log.error("auth.approve_pending.restore_failed", error=str(e))
        else:
            log.info("auth.approve_pending.restored")
