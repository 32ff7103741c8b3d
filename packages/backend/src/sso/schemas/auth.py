"""Pydantic schemas for the auth API.

Learn: Request schemas carry plain passwords in; response schemas are
built from domain dataclasses (from_attributes) and have no field for
a password hash, so a hash cannot leak through a response even by
accident.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from sso.domain.models import BirthDate, Profile, Role


class DateBody(BaseModel):
    year: int = 0
    month: int = 0
    day: int = 0

    model_config = {"from_attributes": True}


class UserInfo(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)
    name: str = ""
    surname: str = ""
    middle_name: str = ""
    phone_number: str = ""
    birth_date: DateBody = Field(default_factory=DateBody)

    def to_profile(self) -> Profile:
        return Profile(
            email=self.email,
            password=self.password,
            name=self.name,
            surname=self.surname,
            middle_name=self.middle_name,
            phone_number=self.phone_number,
            birth_date=BirthDate(
                self.birth_date.year, self.birth_date.month, self.birth_date.day
            ),
        )


# ─── Login ──────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str
    password: str
    role: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"


# ─── Pending registrations ──────────────────────────────

class RegisterPendingRequest(BaseModel):
    user_info: UserInfo
    role: str
    meta: dict[str, str] = Field(default_factory=dict)


class PendingCreated(BaseModel):
    id: str


class PendingUserRead(BaseModel):
    id: str
    email: str
    name: str
    surname: str
    middle_name: str
    phone_number: str
    birth_date: DateBody
    role: Role
    meta: dict[str, str]
    created_at: datetime
    expires_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ─── Permanent registration ─────────────────────────────

class RegisterStudentRequest(BaseModel):
    user_info: UserInfo
    group: str = ""
    student_number: str = ""


class RegisterTeacherRequest(BaseModel):
    user_info: UserInfo
    title: str = ""
    department: str = ""
    degree: str = ""


class RegisterAdminRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8)


class RegisterResponse(BaseModel):
    user_id: int


# ─── Identities (never with pass_hash) ──────────────────

class UserRead(BaseModel):
    id: int
    email: str
    name: str
    surname: str
    middle_name: str
    phone_number: str
    birth_date: DateBody

    model_config = {"from_attributes": True}


class StudentRead(UserRead):
    group: str
    student_number: str


class TeacherRead(UserRead):
    title: str
    department: str
    degree: str


class AdminRead(BaseModel):
    id: int
    email: str

    model_config = {"from_attributes": True}
