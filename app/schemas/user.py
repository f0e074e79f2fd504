from pydantic import BaseModel, Field

from app.schemas.common import NormalizedEmail


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: NormalizedEmail
    password: str = Field(min_length=6)


class EmailOnly(BaseModel):
    email: NormalizedEmail


class VerifyOtp(BaseModel):
    email: NormalizedEmail
    otp: str


class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str
    role: str | None = None  # "admin" or "superadmin" selects the admin collection


class PrincipalResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
