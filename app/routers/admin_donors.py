import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.donor import DONOR_AGE_CONSTRAINT, SCHEMA_MAX_DONOR_AGE, SCHEMA_MIN_DONOR_AGE, Donor
from app.schemas.donor import DonorPayload
from app.services.auth_middleware import Principal, get_current_admin
from app.services.donor_service import record_donation_if_eligible, serialize_donor
from app.services.eligibility_service import days_until_eligible
from app.utils.errors import InvalidInputError, NotFoundError
from app.utils.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/donors", tags=["Admin Donors"])


def _get_donor(db: Session, donor_id: int, active_only: bool = False) -> Donor:
    query = db.query(Donor).filter(Donor.id == donor_id)
    if active_only:
        query = query.filter(Donor.is_active.is_(True))
    donor = query.first()
    if not donor:
        raise NotFoundError("Donor not found")
    return donor


def _commit_donor(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if DONOR_AGE_CONSTRAINT not in str(exc.orig):
            raise
        # Route accepts ages the donors table does not
        raise InvalidInputError(
            f"Age must be between {SCHEMA_MIN_DONOR_AGE} and {SCHEMA_MAX_DONOR_AGE}"
        ) from exc


@router.get("")
def list_donors(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        query = db.query(Donor).filter(Donor.is_active.is_(True)).order_by(Donor.created_at.desc(), Donor.id.desc())
        donors, pagination = paginate(query, page, limit)
        now = datetime.utcnow()
        return create_response(
            message="Donors fetched successfully",
            data={"donors": [serialize_donor(donor, now=now) for donor in donors], "pagination": pagination},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch donors")


@router.get("/{donor_id}")
def get_donor(
    donor_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        donor = _get_donor(db, donor_id)
        return create_response(
            message="Donor fetched successfully",
            data=serialize_donor(donor),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch donor")


@router.post("")
def create_donor(
    body: DonorPayload,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        body.validate_ranges()
        donor = Donor(**body.model_dump())
        db.add(donor)
        _commit_donor(db)
        db.refresh(donor)

        logger.info("Donor id=%s registered by admin id=%s", donor.id, current_admin.id)
        return create_response(
            message="Donor registered successfully",
            data=serialize_donor(donor),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to register donor")


@router.put("/{donor_id}")
def update_donor(
    donor_id: int,
    body: DonorPayload,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        body.validate_ranges()
        donor = _get_donor(db, donor_id)
        for field, value in body.model_dump().items():
            setattr(donor, field, value)
        _commit_donor(db)
        db.refresh(donor)

        return create_response(
            message="Donor updated successfully",
            data=serialize_donor(donor),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update donor")


@router.delete("/{donor_id}")
def delete_donor(
    donor_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        donor = _get_donor(db, donor_id)
        donor.is_active = False
        db.commit()

        return create_response(
            message="Donor deleted successfully",
            data={"deleted": True, "donor_id": donor_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to delete donor")


@router.post("/{donor_id}/record-donation")
def record_donation(
    donor_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_admin),
):
    try:
        donor = _get_donor(db, donor_id, active_only=True)
        now = datetime.utcnow()

        if not record_donation_if_eligible(db, donor.id, now):
            db.refresh(donor)
            remaining = days_until_eligible(donor.last_donation, now)
            raise InvalidInputError(f"Donor is not eligible. Must wait {remaining} more days.")

        db.refresh(donor)
        return create_response(
            message="Donation recorded successfully",
            data=serialize_donor(donor, now=now),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to record donation")
