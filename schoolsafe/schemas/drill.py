from datetime import datetime
from pydantic import Field
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserBrief

class DrillCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    scheduled_date: datetime
    participants: list[int] = []

class DrillStatusIn(CamelModel):
    # checked by the service so the error names the allowed values
    status: str
    feedback: str | None = None

class DrillOut(CamelModel):
    id: int
    title: str
    description: str | None = ""
    scheduled_date: datetime
    tenant_id: int
    created_by: int
    creator: UserBrief | None = None
    status: str
    participants: list[UserBrief] = []
    feedback: str | None = None
    created_at: datetime | None = None
