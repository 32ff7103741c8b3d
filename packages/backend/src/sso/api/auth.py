"""Auth API — login, pending registrations, identities, role checks.

Learn: Routes are thin: parse the body, call one AuthService method,
translate a domain error into a status code. Which code goes with which
error kind lives in ERROR_STATUS and nowhere else.

- POST   /auth/login                      → token (open)
- POST   /auth/pending                    → submit a registration (open)
- GET    /auth/pending                    → list live requests (admin)
- POST   /auth/pending/:id/approve        → promote to identity (admin)
- DELETE /auth/pending/:id                → reject (admin)
- POST   /auth/students|teachers|admins   → register directly (admin)
- GET    /auth/students|teachers|admins   → list identities (admin)
- DELETE /auth/users/:id?role=            → delete an identity (admin)
- GET    /auth/users/:id/is-admin|is-student|is-teacher (open)
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from sso.api.deps import get_auth_service
from sso.auth.dependencies import require_admin
from sso.domain.models import Profile
from sso.errors import (
    AuthError,
    InvalidCredentials,
    InvalidUserID,
    PendingUserNotFound,
    RoleNotExists,
    UserExists,
    UserNotMatchingRole,
)
from sso.schemas.auth import (
    AdminRead,
    LoginRequest,
    PendingCreated,
    PendingUserRead,
    RegisterAdminRequest,
    RegisterPendingRequest,
    RegisterResponse,
    RegisterStudentRequest,
    RegisterTeacherRequest,
    StudentRead,
    TeacherRead,
    TokenResponse,
)
from sso.services.auth_service import AuthService

router = APIRouter(prefix="/auth")

_admin = [Depends(require_admin)]

ERROR_STATUS: dict[type[AuthError], tuple[int, str]] = {
    InvalidCredentials: (401, "Invalid credentials"),
    UserNotMatchingRole: (403, "User has no account with this role"),
    InvalidUserID: (404, "User not found"),
    PendingUserNotFound: (404, "Pending user not found"),
    UserExists: (409, "User with these credentials and role already exists"),
    RoleNotExists: (422, "Role does not exist"),
}


def _http_error(e: AuthError) -> HTTPException:
    """Map a domain error to an HTTP error; unknown kinds are a 500."""
    for kind, (status, detail) in ERROR_STATUS.items():
        if isinstance(e, kind):
            return HTTPException(status_code=status, detail=detail)
    return HTTPException(status_code=500, detail="Internal server error")


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, svc: AuthService = Depends(get_auth_service)):
    """Login with email, password and role → session token."""
    try:
        token = await svc.login(body.email, body.password, body.role)
    except AuthError as e:
        raise _http_error(e)
    return TokenResponse(token=token)


# ─── Pending registrations ──────────────────────────────


@router.post("/pending", response_model=PendingCreated, status_code=201)
async def register_pending(
    body: RegisterPendingRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """Submit a registration request for an admin to review."""
    try:
        pending_id = await svc.register_pending(
            body.user_info.to_profile(), body.role, body.meta
        )
    except AuthError as e:
        raise _http_error(e)
    return PendingCreated(id=pending_id)


@router.get("/pending", response_model=list[PendingUserRead], dependencies=_admin)
async def list_pending(svc: AuthService = Depends(get_auth_service)):
    try:
        return await svc.list_pending()
    except AuthError as e:
        raise _http_error(e)


@router.post(
    "/pending/{pending_id}/approve",
    response_model=RegisterResponse,
    dependencies=_admin,
)
async def approve_pending(
    pending_id: str,
    svc: AuthService = Depends(get_auth_service),
):
    """Approve a request; the account exists as soon as this returns."""
    try:
        user_id = await svc.approve_pending(pending_id)
    except AuthError as e:
        raise _http_error(e)
    return RegisterResponse(user_id=user_id)


@router.delete("/pending/{pending_id}", dependencies=_admin)
async def delete_pending(
    pending_id: str,
    svc: AuthService = Depends(get_auth_service),
):
    """Reject a request."""
    try:
        await svc.delete_pending(pending_id)
    except AuthError as e:
        raise _http_error(e)
    return {"deleted": True}


# ─── Direct registration ────────────────────────────────


@router.post(
    "/students", response_model=RegisterResponse, status_code=201, dependencies=_admin
)
async def register_student(
    body: RegisterStudentRequest,
    svc: AuthService = Depends(get_auth_service),
):
    try:
        user_id = await svc.register_student(
            body.user_info.to_profile(), body.group, body.student_number
        )
    except AuthError as e:
        raise _http_error(e)
    return RegisterResponse(user_id=user_id)


@router.post(
    "/teachers", response_model=RegisterResponse, status_code=201, dependencies=_admin
)
async def register_teacher(
    body: RegisterTeacherRequest,
    svc: AuthService = Depends(get_auth_service),
):
    try:
        user_id = await svc.register_teacher(
            body.user_info.to_profile(), body.title, body.department, body.degree
        )
    except AuthError as e:
        raise _http_error(e)
    return RegisterResponse(user_id=user_id)


@router.post(
    "/admins", response_model=RegisterResponse, status_code=201, dependencies=_admin
)
async def register_admin(
    body: RegisterAdminRequest,
    svc: AuthService = Depends(get_auth_service),
):
    try:
        user_id = await svc.register_admin(
            Profile(email=body.email, password=body.password)
        )
    except AuthError as e:
        raise _http_error(e)
    return RegisterResponse(user_id=user_id)


# ─── Lists ──────────────────────────────────────────────


@router.get("/students", response_model=list[StudentRead], dependencies=_admin)
async def list_students(svc: AuthService = Depends(get_auth_service)):
    try:
        return await svc.list_students()
    except AuthError as e:
        raise _http_error(e)


@router.get("/teachers", response_model=list[TeacherRead], dependencies=_admin)
async def list_teachers(svc: AuthService = Depends(get_auth_service)):
    try:
        return await svc.list_teachers()
    except AuthError as e:
        raise _http_error(e)


@router.get("/admins", response_model=list[AdminRead], dependencies=_admin)
async def list_admins(svc: AuthService = Depends(get_auth_service)):
    """List admins — email and id only."""
    try:
        return await svc.list_admins()
    except AuthError as e:
        raise _http_error(e)


# ─── Delete ─────────────────────────────────────────────


@router.delete("/users/{user_id}", dependencies=_admin)
async def delete_user(
    user_id: int,
    role: str = Query(...),
    svc: AuthService = Depends(get_auth_service),
):
    try:
        await svc.delete_user(user_id, role)
    except AuthError as e:
        raise _http_error(e)
    return {"deleted": True}


# ─── Role checks ────────────────────────────────────────


@router.get("/users/{user_id}/is-admin")
async def is_admin(user_id: int, svc: AuthService = Depends(get_auth_service)):
    try:
        return {"is_admin": await svc.is_admin(user_id)}
    except AuthError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/is-student")
async def is_student(user_id: int, svc: AuthService = Depends(get_auth_service)):
    try:
        return {"is_student": await svc.is_student(user_id)}
    except AuthError as e:
        raise _http_error(e)


@router.get("/users/{user_id}/is-teacher")
async def is_teacher(user_id: int, svc: AuthService = Depends(get_auth_service)):
    try:
        return {"is_teacher": await svc.is_teacher(user_id)}
    except AuthError as e:
        raise _http_error(e)
