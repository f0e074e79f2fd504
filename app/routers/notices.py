import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.notice import Notice
from app.schemas.notice import NoticeCreate, NoticeUpdate
from app.services.auth_middleware import Principal, get_current_admin, get_current_principal
from app.services.notice_service import PRIORITY_ORDER, active_notices, get_active_notice, serialize_notice
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notices", tags=["Notices"])


@router.get("")
def list_notices(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        notices = active_notices(db).order_by(PRIORITY_ORDER.desc(), Notice.created_at.desc(), Notice.id.desc()).all()
        payload = [serialize_notice(notice) for notice in notices]
        return create_response(
            message="Notices fetched successfully",
            data={"count": len(payload), "notices": payload},
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
def create_notice(
    body: NoticeCreate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        notice = Notice(
            title=body.title.strip(),
            content=body.content.strip(),
            priority=body.priority.value,
            author_id=current_admin.id,
        )
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
        return handle_exception(exc, "Failed to create notice")


@router.put("/{notice_id}")
def update_notice(
    notice_id: int,
    body: NoticeUpdate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        notice = get_active_notice(db, notice_id)
        if body.title is not None:
            notice.title = body.title.strip()
        if body.content is not None:
            notice.content = body.content.strip()
        if body.priority is not None:
            notice.priority = body.priority.value
        db.commit()
        db.refresh(notice)

        return create_response(
            message="Notice updated successfully",
            data=serialize_notice(notice),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update notice")


@router.delete("/{notice_id}")
def delete_notice(
    notice_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        notice = get_active_notice(db, notice_id)
        notice.is_active = False
        db.commit()

        return create_response(
            message="Notice deleted successfully",
            data={"deleted": True, "notice_id": notice_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to delete notice")
