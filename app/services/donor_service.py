import logging
from datetime import datetime

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.models.donor import Donor
from app.schemas.donor import DonorResponse
from app.services.eligibility_service import donor_eligibility, eligibility_cutoff

logger = logging.getLogger(__name__)


def serialize_donor(donor: Donor, include_medical_history: bool = True, now: datetime | None = None) -> dict:
    eligibility = donor_eligibility(donor.last_donation, now)
    payload = DonorResponse(
        id=donor.id,
        name=donor.name,
        roll_no=donor.roll_no,
        blood_group=donor.blood_group,
        age=donor.age,
        phone=donor.phone,
        email=donor.email,
        branch=donor.branch,
        year=donor.year,
        medical_history=donor.medical_history,
        last_donation=donor.last_donation,
        is_active=donor.is_active,
        is_eligible_for_donation=eligibility.eligible,
        days_until_eligible=eligibility.days_remaining,
        created_at=donor.created_at,
        updated_at=donor.updated_at,
    ).model_dump()
    if not include_medical_history:
        payload.pop("medical_history", None)
    return payload


def record_donation_if_eligible(db: Session, donor_id: int, now: datetime | None = None) -> bool:
    """Set ``last_donation`` only if the donor is still eligible at write time.

    The eligibility check and the write happen in one conditional UPDATE, so
    two concurrent recordings for the same donor cannot both succeed.
    """
    now = now or datetime.utcnow()
    result = db.execute(
        update(Donor)
        .where(
            Donor.id == donor_id,
            Donor.is_active.is_(True),
            or_(Donor.last_donation.is_(None), Donor.last_donation <= eligibility_cutoff(now)),
        )
        .values(last_donation=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    recorded = result.rowcount == 1
    logger.info("Donation for donor id=%s recorded=%s", donor_id, recorded)
    return recorded
