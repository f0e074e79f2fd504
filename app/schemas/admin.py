from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.common import NormalizedEmail


class AdminRoleEnum(str, Enum):
    normal = "normal"
    main = "main"


class AdminCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: NormalizedEmail
    password: str = Field(min_length=6)
    role: AdminRoleEnum = AdminRoleEnum.normal


class AdminUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    email: NormalizedEmail | None = None
    role: AdminRoleEnum | None = None


class AdminResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}
