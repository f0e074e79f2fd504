import logging

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.notice import Notice
from app.services.auth_middleware import Principal, get_current_admin
from app.services.notice_service import active_notices, get_active_notice, normalize_priority, serialize_notice
from app.services.spaces_service import discard_attachments, store_upload
from app.utils.errors import InvalidInputError
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/notices", tags=["Admin Notices"])

UPLOAD_FOLDER = "notices"


def _require_text(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise InvalidInputError(f"{field} is required")
    return value.strip()


@router.get("")
def list_notices(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        query = active_notices(db).order_by(Notice.created_at.desc(), Notice.id.desc())
        notices, pagination = paginate(query, page, limit)
        return create_response(
            message="Notices fetched successfully",
            data={"notices": [serialize_notice(notice) for notice in notices], "pagination": pagination},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch notices")


@router.get("/{notice_id}")
def get_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        return create_response(
            message="Notice fetched successfully",
            data=serialize_notice(get_active_notice(db, notice_id)),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch notice")


@router.post("")
async def create_notice(
    title: str = Form(...),
    content: str = Form(...),
    priority: str | None = Form(None),
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    stored = []
    try:
        notice = Notice(
            title=_require_text(title, "Title"),
            content=_require_text(content, "Content"),
            priority=normalize_priority(priority),
            author_id=current_admin.id,
        )
        if file is not None and file.filename:
            notice.file = await store_upload(file, UPLOAD_FOLDER)
            stored.append(notice.file)

        db.add(notice)
        db.commit()
        db.refresh(notice)

        logger.info("Notice id=%s created by admin id=%s", notice.id, current_admin.id)
        return create_response(
            message="Notice created successfully",
            data=serialize_notice(notice),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        discard_attachments(stored)
        return handle_exception(exc, "Failed to create notice")


@router.put("/{notice_id}")
async def update_notice(
    notice_id: int,
    title: str = Form(...),
    content: str = Form(...),
    priority: str | None = Form(None),
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    stored = []
    try:
        notice = get_active_notice(db, notice_id)
        notice.title = _require_text(title, "Title")
        notice.content = _require_text(content, "Content")
        notice.priority = normalize_priority(priority)
        if file is not None and file.filename:
            notice.file = await store_upload(file, UPLOAD_FOLDER)
            stored.append(notice.file)

        db.commit()
        db.refresh(notice)

        return create_response(
            message="Notice updated successfully",
            data=serialize_notice(notice),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        discard_attachments(stored)
        return handle_exception(exc, "Failed to update notice")


@router.delete("/{notice_id}")
def delete_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    stored = []
    try:
        notice = get_active_notice(db, notice_id)
        notice.is_active = False
        db.commit()

        logger.info("Notice id=%s soft deleted by admin id=%s", notice_id, current_admin.id)
        return create_response(
            message="Notice deleted successfully",
            data={"deleted": True, "notice_id": notice_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to delete notice")
