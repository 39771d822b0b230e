from datetime import datetime
from pydantic import Field
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserBrief

class MessageCreate(CamelModel):
    receiver_id: int
    subject: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)

class MessageOut(CamelModel):
    id: int
    sender_id: int
    receiver_id: int
    sender: UserBrief | None = None
    receiver: UserBrief | None = None
    subject: str
    message: str
    tenant_id: int
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None

class UnreadCountOut(CamelModel):
    unread_count: int
