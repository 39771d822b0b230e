from datetime import datetime
from pydantic import EmailStr
from schoolsafe.schemas.base import CamelModel

class UserBrief(CamelModel):
    id: int
    first_name: str
    last_name: str
    role: str | None = None
    grade: str | None = None

class UserOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    role: str
    tenant_id: int
    grade: str | None = None
    student_id: int | None = None
    phone: str | None = None
    school: str | None = None
    is_active: bool = True
    created_at: datetime | None = None

class ContactOut(CamelModel):
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
