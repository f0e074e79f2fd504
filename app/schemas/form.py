from datetime import datetime

from pydantic import AnyHttpUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

from app.schemas.common import AttachmentResponse, AuthorSummary
from app.utils.dates import to_naive_utc
from app.utils.errors import InvalidInputError

MAX_FORM_FILES = 5

_url_adapter = TypeAdapter(AnyHttpUrl)


def validate_link(link: str | None) -> str:
    try:
        _url_adapter.validate_python(link)
    except ValidationError as exc:
        raise InvalidInputError("Please provide a valid URL") from exc
    return link.strip()


class FormResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    link: str
    event_date: datetime
    files: list[AttachmentResponse] = Field(default_factory=list)
    created_by: AuthorSummary | None = Field(default=None, validation_alias="creator")
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FormCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    link: str
    event_date: datetime

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class FormUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    link: str | None = None
    event_date: datetime | None = None

    @field_validator("event_date")
    @classmethod
    def normalize_event_date(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)
