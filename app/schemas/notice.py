from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.common import AttachmentResponse, AuthorSummary


class PriorityEnum(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


PRIORITY_RANK = {PriorityEnum.low.value: 0, PriorityEnum.medium.value: 1, PriorityEnum.high.value: 2}


class NoticeResponse(BaseModel):
    id: int
    title: str
    content: str
    priority: str
    file: AttachmentResponse | None = None
    author: AuthorSummary | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoticeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    priority: PriorityEnum = PriorityEnum.medium


class NoticeUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1)
    priority: PriorityEnum | None = None
