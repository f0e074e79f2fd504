from sqlalchemy import case
from sqlalchemy.orm import Query, Session, joinedload

from app.models.notice import Notice
from app.schemas.notice import PRIORITY_RANK, NoticeResponse, PriorityEnum
from app.utils.errors import InvalidInputError, NotFoundError

PRIORITY_ORDER = case(PRIORITY_RANK, value=Notice.priority, else_=PRIORITY_RANK[PriorityEnum.medium.value])


def active_notices(db: Session) -> Query:
    return db.query(Notice).options(joinedload(Notice.author)).filter(Notice.is_active.is_(True))


def get_active_notice(db: Session, notice_id: int) -> Notice:
    notice = active_notices(db).filter(Notice.id == notice_id).first()
    if not notice:
        raise NotFoundError("Notice not found")
    return notice


def normalize_priority(priority: str | None) -> str:
    value = (priority or PriorityEnum.medium.value).strip().lower()
    if value not in PRIORITY_RANK:
        raise InvalidInputError("Priority must be one of: low, medium, high")
    return value


def serialize_notice(notice: Notice) -> dict:
    return NoticeResponse.model_validate(notice).model_dump()
