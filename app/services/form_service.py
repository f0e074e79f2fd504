from datetime import datetime

from sqlalchemy.orm import Query, Session, joinedload

from app.models.form import RegistrationForm
from app.utils.dates import to_naive_utc
from app.schemas.form import FormResponse
from app.utils.errors import InvalidInputError, NotFoundError


def active_forms(db: Session) -> Query:
    return (
        db.query(RegistrationForm)
        .options(joinedload(RegistrationForm.creator))
        .filter(RegistrationForm.is_active.is_(True))
    )


def get_active_form(db: Session, form_id: int) -> RegistrationForm:
    form = active_forms(db).filter(RegistrationForm.id == form_id).first()
    if not form:
        raise NotFoundError("Form not found")
    return form


def parse_event_date(value: str | None) -> datetime:
    if not value:
        raise InvalidInputError("Event date is required")
    try:
        normalized = value.replace("Z", "+00:00") if value.endswith("Z") else value
        return to_naive_utc(datetime.fromisoformat(normalized))
    except ValueError as exc:
        raise InvalidInputError("Invalid event date format") from exc


def serialize_form(form: RegistrationForm) -> dict:
    return FormResponse.model_validate(form).model_dump()
