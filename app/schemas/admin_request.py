from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import NormalizedEmail


class AdminRequestSubmit(BaseModel):
    email: NormalizedEmail
    name: str = Field(min_length=1, max_length=120)
    roll_no: str = Field(min_length=1, max_length=50)
    branch: str = Field(min_length=1, max_length=120)
    year: str = Field(min_length=1, max_length=20)
    phone: str = Field(min_length=1, max_length=30)
    password: str = Field(min_length=6)


class AdminRequestReject(BaseModel):
    reason: str | None = None


class AdminRequestResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    roll_no: str | None = None
    branch: str | None = None
    year: str | None = None
    phone: str | None = None
    status: str
    email_verified: bool
    reviewed_by: int | None = None
    reviewed_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
