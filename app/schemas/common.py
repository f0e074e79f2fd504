from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr

NormalizedEmail = Annotated[EmailStr, AfterValidator(lambda value: value.strip().lower())]


class AttachmentResponse(BaseModel):
    filename: str
    original_name: str | None = None
    mimetype: str | None = None
    size: int | None = None
    url: str
    key: str | None = None


class AuthorSummary(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


