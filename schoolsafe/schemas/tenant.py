from datetime import datetime
from pydantic import EmailStr, Field
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserOut

PHONE_PATTERN = r"^\d{10,15}$"

class EmergencyContact(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(pattern=r"^\d{10}$")
    role: str = Field(min_length=1)

class TenantRegisterIn(CamelModel):
    first_name: str = Field(min_length=1, max_length=120)
    last_name: str = Field(min_length=1, max_length=120)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)
    school_name: str = Field(min_length=1, max_length=200)
    grade: str | None = None

class TenantUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    address: str | None = Field(default=None, min_length=1)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    emergency_contacts: list[EmergencyContact] | None = None
    is_active: bool | None = None

class TenantOut(CamelModel):
    id: int
    name: str
    address: str
    contact_email: str
    contact_phone: str
    emergency_contacts: list[EmergencyContact] = []
    is_active: bool
    created_at: datetime | None = None

class SchoolOut(CamelModel):
    id: int
    name: str
    contact_email: str

class TenantRegisterData(CamelModel):
    tenant: TenantOut
    user: UserOut
    token: str

class TenantRegisterOut(CamelModel):
    success: bool = True
    message: str = ""
    data: TenantRegisterData
