from datetime import datetime
from typing import Literal
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserBrief

Role = Literal["director", "teacher", "student", "parent"]

class AlertCreate(CamelModel):
    message: str = ""
    target_roles: list[Role] = []
    emergency_level: Literal["low", "medium", "high"] = "medium"

class AlertStatusIn(CamelModel):
    status: Literal["active", "resolved", "archived"]

class AlertOut(CamelModel):
    id: int
    message: str
    sender_id: int
    sender: UserBrief | None = None
    tenant_id: int
    target_roles: list[str]
    emergency_level: str
    status: str
    dismissed: bool
    sent: bool
    created_at: datetime | None = None

class AlertEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    alert: AlertOut

class AlertListOut(CamelModel):
    success: bool = True
    count: int
    alerts: list[AlertOut]
