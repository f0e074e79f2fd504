import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.form import RegistrationForm
from app.schemas.form import FormCreate, FormUpdate, validate_link
from app.services.auth_middleware import Principal, get_current_admin, get_current_principal
from app.services.form_service import active_forms, get_active_form, serialize_form
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/forms", tags=["Forms"])


@router.get("")
def list_forms(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        forms = active_forms(db).order_by(RegistrationForm.event_date.asc(), RegistrationForm.id.asc()).all()
        payload = [serialize_form(form) for form in forms]
        return create_response(
            message="Forms fetched successfully",
            data={"count": len(payload), "forms": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch forms")


@router.get("/{form_id}")
def get_form(
    form_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        return create_response(
            message="Form fetched successfully",
            data=serialize_form(get_active_form(db, form_id)),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch form")


@router.post("")
def create_form(
    body: FormCreate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        form = RegistrationForm(
            title=body.title.strip(),
            description=body.description,
            link=validate_link(body.link),
            event_date=body.event_date,
            files=[],
            created_by=current_admin.id,
        )
        db.add(form)
        db.commit()
        db.refresh(form)

        logger.info("Form id=%s created by admin id=%s", form.id, current_admin.id)
        return create_response(
            message="Form created successfully",
            data=serialize_form(form),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to create form")


@router.put("/{form_id}")
def update_form(
    form_id: int,
    body: FormUpdate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        form = get_active_form(db, form_id)
        if body.title is not None:
            form.title = body.title.strip()
        if body.description is not None:
            form.description = body.description
        if body.link is not None:
            form.link = validate_link(body.link)
        if body.event_date is not None:
            form.event_date = body.event_date
        db.commit()
        db.refresh(form)

        return create_response(
            message="Form updated successfully",
            data=serialize_form(form),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update form")


@router.delete("/{form_id}")
def delete_form(
    form_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        form = get_active_form(db, form_id)
        form.is_active = False
        db.commit()

        return create_response(
            message="Form deleted successfully",
            data={"deleted": True, "form_id": form_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to delete form")
