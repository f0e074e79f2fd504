import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.form import RegistrationForm
from app.schemas.form import MAX_FORM_FILES, validate_link
from app.services.auth_middleware import Principal, get_current_admin
from app.services.form_service import active_forms, get_active_form, parse_event_date, serialize_form
from app.services.spaces_service import discard_attachments, store_uploads
from app.utils.errors import InvalidInputError
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/forms", tags=["Admin Forms"])

UPLOAD_FOLDER = "forms"


async def _store_files(files: list[UploadFile] | None) -> list[dict]:
    uploads = [upload for upload in files or [] if upload.filename]
    if len(uploads) > MAX_FORM_FILES:
        raise InvalidInputError(f"At most {MAX_FORM_FILES} files can be attached")
    return await store_uploads(uploads, UPLOAD_FOLDER)


@router.get("")
def list_forms(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        query = active_forms(db).order_by(RegistrationForm.created_at.desc(), RegistrationForm.id.desc())
        forms, pagination = paginate(query, page, limit)
        return create_response(
            message="Forms fetched successfully",
            data={"forms": [serialize_form(form) for form in forms], "pagination": pagination},
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
async def create_form(
    title: str = Form(...),
    link: str = Form(...),
    event_date: str = Form(...),
    description: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    stored = []
    try:
        if not title.strip():
            raise InvalidInputError("Title is required")
        form = RegistrationForm(
            title=title.strip(),
            description=description,
            link=validate_link(link),
            event_date=parse_event_date(event_date),
            created_by=current_admin.id,
        )
        stored = await _store_files(files)
        form.files = stored

        db.add(form)
        db.commit()
        db.refresh(form)

        logger.info("Form id=%s created by admin id=%s with %s files", form.id, current_admin.id, len(form.files))
        return create_response(
            message="Form created successfully",
            data=serialize_form(form),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        discard_attachments(stored)
        return handle_exception(exc, "Failed to create form")


@router.put("/{form_id}")
async def update_form(
    form_id: int,
    title: str = Form(...),
    link: str = Form(...),
    event_date: str = Form(...),
    description: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    stored = []
    try:
        form = get_active_form(db, form_id)
        if not title.strip():
            raise InvalidInputError("Title is required")
        form.title = title.strip()
        form.description = description
        form.link = validate_link(link)
        form.event_date = parse_event_date(event_date)

        # New uploads replace the previous attachment list
        stored = await _store_files(files)
        if stored:
            form.files = stored

        db.commit()
        db.refresh(form)

        return create_response(
            message="Form updated successfully",
            data=serialize_form(form),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        discard_attachments(stored)
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
