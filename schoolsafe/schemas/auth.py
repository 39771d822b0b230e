
from typing import Literal
from pydantic import EmailStr, Field, model_validator
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserOut, UserBrief

PHONE_PATTERN = r"^\d{10}$"

class RegisterIn(CamelModel):
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    role: Literal["teacher", "student", "parent"]
    tenant_id: int
    student_id: int | None = None
    grade: str | None = None
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)

    @model_validator(mode="after")
    def role_fields(self):
        if self.role == "student" and not (self.grade or "").strip():
            raise ValueError("Grade is required for students")
        if self.role == "parent" and self.student_id is None:
            raise ValueError("Student selection is required for parents")
        return self

class LoginIn(CamelModel):
    email: EmailStr
    password: str

class AuthData(CamelModel):
    user: UserOut
    token: str
    token_type: str = "bearer"
    student: UserBrief | None = None

class AuthOut(CamelModel):
    success: bool = True
    message: str = ""
    data: AuthData
