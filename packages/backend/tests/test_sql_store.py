"""SQL identity store tests.

Learn: Runs the real SQLAlchemy mapping against an in-memory SQLite
database (aiosqlite). StaticPool keeps one connection alive so every
session sees the same in-memory database.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from sso.db.engine import create_tables
from sso.domain.models import Admin, BirthDate, Role, Student, Teacher
from sso.services.auth_service import AuthService
from sso.storage import (
    UserDontHaveRoleError,
    UserExistsError,
    UserHasAnotherRoleError,
    UserNotFoundError,
)
from sso.storage.sql import SqlIdentityStore
from conftest import TOKEN_TTL, make_profile


@pytest_asyncio.fixture()
async def session():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_tables(bind=engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        yield db
    await engine.dispose()


@pytest.fixture()
def store(session):
    return SqlIdentityStore(session)


def _student(email="ivan@example.com", **kw) -> Student:
    return Student(
        email=email,
        pass_hash=b"$2b$04$hash",
        name="Ivan",
        surname="Petrov",
        birth_date=BirthDate(2004, 5, 17),
        group="IU7-42",
        student_number="S-1001",
        **kw,
    )


@pytest.mark.asyncio
async def test_save_and_find_student(store):
    user_id = await store.save_student(_student())

    found = await store.student("ivan@example.com")

    assert found.id == user_id
    assert found.role is Role.STUDENT
    assert found.pass_hash == b"$2b$04$hash"
    assert found.birth_date == BirthDate(2004, 5, 17)
    assert (found.group, found.student_number) == ("IU7-42", "S-1001")


@pytest.mark.asyncio
async def test_save_and_find_teacher(store):
    await store.save_teacher(
        Teacher(email="t@example.com", pass_hash=b"h", title="Dr", department="CS", degree="PhD")
    )

    found = await store.teacher("t@example.com")

    assert (found.title, found.department, found.degree) == ("Dr", "CS", "PhD")


@pytest.mark.asyncio
async def test_admin_has_shared_shape(store):
    user_id = await store.save_admin(Admin(email="root@example.com", pass_hash=b"h"))

    found = await store.admin("root@example.com")

    assert isinstance(found, Admin)
    assert found.id == user_id
    assert found.name == ""


@pytest.mark.asyncio
async def test_duplicate_email_same_role(store):
    first = await store.save_student(_student())

    with pytest.raises(UserExistsError):
        await store.save_student(_student())

    # The session is still usable and the first row is intact
    assert (await store.student("ivan@example.com")).id == first


@pytest.mark.asyncio
async def test_same_email_other_role_is_allowed(store):
    student_id = await store.save_student(_student())
    teacher_id = await store.save_teacher(Teacher(email="ivan@example.com", pass_hash=b"h"))

    assert student_id != teacher_id
    assert await store.is_student(student_id)
    assert await store.is_teacher(teacher_id)


@pytest.mark.asyncio
async def test_find_missing_and_other_role(store):
    await store.save_teacher(Teacher(email="t@example.com", pass_hash=b"h"))

    with pytest.raises(UserNotFoundError):
        await store.student("nobody@example.com")
    with pytest.raises(UserHasAnotherRoleError):
        await store.student("t@example.com")


@pytest.mark.asyncio
async def test_ids_are_unique_across_roles(store):
    ids = [
        await store.save_student(_student("a@example.com")),
        await store.save_teacher(Teacher(email="b@example.com", pass_hash=b"h")),
        await store.save_admin(Admin(email="c@example.com", pass_hash=b"h")),
    ]

    assert len(set(ids)) == 3
    assert all(i > 0 for i in ids)


@pytest.mark.asyncio
async def test_lists_are_per_role(store):
    await store.save_student(_student("a@example.com"))
    await store.save_student(_student("b@example.com"))
    await store.save_admin(Admin(email="c@example.com", pass_hash=b"h"))

    assert [s.email for s in await store.list_students()] == ["a@example.com", "b@example.com"]
    assert await store.list_teachers() == []
    assert [a.email for a in await store.list_admins()] == ["c@example.com"]


@pytest.mark.asyncio
async def test_membership_unknown_id(store):
    with pytest.raises(UserNotFoundError):
        await store.is_admin(404)


@pytest.mark.asyncio
async def test_delete_user(store):
    user_id = await store.save_student(_student())

    await store.delete_user(user_id, Role.STUDENT)

    with pytest.raises(UserNotFoundError):
        await store.student("ivan@example.com")
    with pytest.raises(UserNotFoundError):
        await store.is_student(user_id)


@pytest.mark.asyncio
async def test_delete_user_wrong_role(store):
    user_id = await store.save_teacher(Teacher(email="t@example.com", pass_hash=b"h"))

    with pytest.raises(UserDontHaveRoleError):
        await store.delete_user(user_id, Role.STUDENT)
    with pytest.raises(UserNotFoundError):
        await store.delete_user(user_id + 100, Role.TEACHER)

    assert await store.is_teacher(user_id)


@pytest.mark.asyncio
async def test_service_over_sql_store(store, pending_store, hasher, tokens):
    """Pending approval end to end with the SQL identity store."""
    svc = AuthService(store, pending_store, hasher, tokens, TOKEN_TTL)
    pending_id = await svc.register_pending(
        make_profile(), "student", {"group": "IU7-42", "student_number": "S-1001"}
    )

    user_id = await svc.approve_pending(pending_id)

    assert await svc.is_student(user_id)
    assert await svc.login("ivan@example.com", "correct-horse", "student")
