from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.donor import Donor
from app.services.auth_middleware import Principal, get_current_principal
from app.services.donor_service import serialize_donor
from app.utils.response import create_response, handle_exception

router = APIRouter(prefix="/api/donors", tags=["Donors"])


@router.get("/list")
def list_public_donors(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        donors = (
            db.query(Donor)
            .filter(Donor.is_active.is_(True))
            .order_by(Donor.created_at.desc(), Donor.id.desc())
            .all()
        )
        now = datetime.utcnow()
        # Medical history is never exposed on the public listing
        payload = [serialize_donor(donor, include_medical_history=False, now=now) for donor in donors]
        return create_response(
            message="Donors fetched successfully",
            data={"count": len(payload), "donors": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch donors")
