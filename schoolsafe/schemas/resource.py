from datetime import datetime
from typing import Annotated, Literal
from pydantic import BeforeValidator, Field
from schoolsafe.schemas.base import CamelModel
from schoolsafe.schemas.user import UserBrief

ResourceType = Literal["article", "video", "pdf", "guideline", "file", "gif"]

def _split_tags(value):
    if value is None:
        return value
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    return value

Tags = Annotated[list[str], BeforeValidator(_split_tags)]

class ResourceCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    type: ResourceType
    content: str = Field(min_length=1)
    tags: Tags = []
    is_public: bool = True
    thumbnail: str | None = None
    duration: int | None = Field(default=None, ge=0)

class ResourceUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: ResourceType | None = None
    content: str | None = Field(default=None, min_length=1)
    tags: Tags | None = None
    is_public: bool | None = None
    thumbnail: str | None = None
    duration: int | None = Field(default=None, ge=0)

class ResourceOut(CamelModel):
    id: int
    title: str
    description: str | None = ""
    type: str
    content: str
    tenant_id: int
    created_by: int
    creator: UserBrief | None = None
    tags: list[str] = []
    is_public: bool
    thumbnail: str | None = None
    duration: int | None = None
    created_at: datetime | None = None

class CompleteIn(CamelModel):
    time_spent: int | None = Field(default=None, ge=0)

class CompletionOut(CamelModel):
    id: int
    resource_id: int
    student_id: int
    completed_at: datetime
    time_spent: int | None = None
    resource: ResourceOut | None = None
