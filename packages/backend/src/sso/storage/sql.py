"""SQL identity store — IdentityStore over async SQLAlchemy.

Learn: One AsyncSession per store instance (per request, in the API).
Writes commit immediately; a unique-constraint violation on
(email, role) is rolled back and surfaces as UserExistsError. Reads
return domain dataclasses, never ORM rows, so nothing outside this
module can lazy-load or mutate a row by accident.

Other driver errors propagate unchanged; the Auth service wraps them.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sso.db.models import AdminRecord, StudentRecord, TeacherRecord, UserRecord
from sso.domain.models import Admin, BirthDate, Role, Student, Teacher, User
from sso.storage import (
    UserDontHaveRoleError,
    UserExistsError,
    UserHasAnotherRoleError,
    UserNotFoundError,
)
from sso.storage.base import IdentityStore

RECORD_TYPES: dict[Role, type[UserRecord]] = {
    Role.STUDENT: StudentRecord,
    Role.TEACHER: TeacherRecord,
    Role.ADMIN: AdminRecord,
}


def _common_columns(user: User) -> dict:
    return {
        "email": user.email,
        "pass_hash": user.pass_hash,
        "name": user.name,
        "surname": user.surname,
        "middle_name": user.middle_name,
        "phone_number": user.phone_number,
        "birth_year": user.birth_date.year,
        "birth_month": user.birth_date.month,
        "birth_day": user.birth_date.day,
    }


def _common_fields(record: UserRecord) -> dict:
    return {
        "id": record.id,
        "email": record.email,
        "pass_hash": record.pass_hash,
        "name": record.name,
        "surname": record.surname,
        "middle_name": record.middle_name,
        "phone_number": record.phone_number,
        "birth_date": BirthDate(record.birth_year, record.birth_month, record.birth_day),
    }


def _student(record: StudentRecord) -> Student:
    return Student(
        **_common_fields(record),
        group=record.group,
        student_number=record.student_number,
    )


def _teacher(record: TeacherRecord) -> Teacher:
    return Teacher(
        **_common_fields(record),
        title=record.title,
        department=record.department,
        degree=record.degree,
    )


def _admin(record: AdminRecord) -> Admin:
    return Admin(**_common_fields(record))


class SqlIdentityStore(IdentityStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Internals ────────────────────────────────────────

    async def _insert(self, record: UserRecord) -> int:
        self.db.add(record)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise UserExistsError(f"{record.role} {record.email} already exists") from e
        user_id = record.id
        await self.db.commit()
        return user_id

    async def _find(self, role: Role, email: str):
        record_type = RECORD_TYPES[role]
        result = await self.db.execute(
            select(record_type).where(record_type.email == email)
        )
        record = result.scalars().first()
        if record is not None:
            return record

        other = await self.db.execute(
            select(UserRecord.id).where(UserRecord.email == email).limit(1)
        )
        if other.scalar() is not None:
            raise UserHasAnotherRoleError(f"{email} is not a {role.value}")
        raise UserNotFoundError(email)

    async def _all(self, role: Role) -> list:
        record_type = RECORD_TYPES[role]
        result = await self.db.execute(select(record_type).order_by(record_type.id))
        return list(result.scalars().all())

    async def _role_of(self, user_id: int) -> Role:
        result = await self.db.execute(
            select(UserRecord.role).where(UserRecord.id == user_id)
        )
        role = result.scalar()
        if role is None:
            raise UserNotFoundError(str(user_id))
        return Role(role)

    # ─── Save ─────────────────────────────────────────────

    async def save_student(self, student: Student) -> int:
        return await self._insert(
            StudentRecord(
                **_common_columns(student),
                group=student.group,
                student_number=student.student_number,
            )
        )

    async def save_teacher(self, teacher: Teacher) -> int:
        return await self._insert(
            TeacherRecord(
                **_common_columns(teacher),
                title=teacher.title,
                department=teacher.department,
                degree=teacher.degree,
            )
        )

    async def save_admin(self, admin: Admin) -> int:
        return await self._insert(AdminRecord(**_common_columns(admin)))

    # ─── Find by email ────────────────────────────────────

    async def student(self, email: str) -> Student:
        return _student(await self._find(Role.STUDENT, email))

    async def teacher(self, email: str) -> Teacher:
        return _teacher(await self._find(Role.TEACHER, email))

    async def admin(self, email: str) -> Admin:
        return _admin(await self._find(Role.ADMIN, email))

    # ─── Lists ────────────────────────────────────────────

    async def list_students(self) -> list[Student]:
        return [_student(r) for r in await self._all(Role.STUDENT)]

    async def list_teachers(self) -> list[Teacher]:
        return [_teacher(r) for r in await self._all(Role.TEACHER)]

    async def list_admins(self) -> list[Admin]:
        return [_admin(r) for r in await self._all(Role.ADMIN)]

    # ─── Membership ───────────────────────────────────────

    async def is_student(self, user_id: int) -> bool:
        return await self._role_of(user_id) is Role.STUDENT

    async def is_teacher(self, user_id: int) -> bool:
        return await self._role_of(user_id) is Role.TEACHER

    async def is_admin(self, user_id: int) -> bool:
        return await self._role_of(user_id) is Role.ADMIN

    # ─── Delete ───────────────────────────────────────────

    async def delete_user(self, user_id: int, role: Role) -> None:
        actual = await self._role_of(user_id)
        if actual is not role:
            raise UserDontHaveRoleError(f"user {user_id} is not a {role.value}")

        record = await self.db.get(RECORD_TYPES[role], user_id)
        await self.db.delete(record)
        await self.db.commit()
