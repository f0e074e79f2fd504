from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.donor import BLOOD_GROUPS
from app.schemas.common import NormalizedEmail
from app.utils.dates import to_naive_utc
from app.utils.errors import InvalidInputError

# Route-level bound; the donors table itself enforces 18 (SCHEMA_MIN_DONOR_AGE)
ROUTE_MIN_DONOR_AGE = 16
ROUTE_MAX_DONOR_AGE = 65


class DonorPayload(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    roll_no: str = Field(min_length=1, max_length=50)
    blood_group: str
    age: int
    phone: str = Field(min_length=1, max_length=30)
    email: NormalizedEmail
    branch: str = Field(min_length=1, max_length=120)
    year: str = Field(min_length=1, max_length=20)
    medical_history: str | None = None
    last_donation: datetime | None = None

    @field_validator("last_donation")
    @classmethod
    def normalize_last_donation(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)

    def validate_ranges(self) -> None:
        if self.blood_group not in BLOOD_GROUPS:
            raise InvalidInputError("Invalid blood group")
        if self.age < ROUTE_MIN_DONOR_AGE or self.age > ROUTE_MAX_DONOR_AGE:
            raise InvalidInputError(f"Age must be between {ROUTE_MIN_DONOR_AGE} and {ROUTE_MAX_DONOR_AGE}")


class DonorResponse(BaseModel):
    id: int
    name: str
    roll_no: str
    blood_group: str
    age: int
    phone: str
    email: str
    branch: str
    year: str
    medical_history: str | None = None
    last_donation: datetime | None = None
    is_active: bool
    is_eligible_for_donation: bool
    days_until_eligible: int
    created_at: datetime
    updated_at: datetime
