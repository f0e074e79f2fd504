import logging
from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.admin import Admin
from app.models.admin_request import AdminRequest
from app.schemas.admin_request import AdminRequestReject, AdminRequestResponse, AdminRequestSubmit
from app.schemas.user import EmailOnly, VerifyOtp
from app.services.auth_middleware import Principal, get_current_super_admin
from app.services.auth_service import hash_password
from app.services.authorization import AdminRole
from app.services.email_services import send_admin_decision_email, send_email_otp
from app.services.otp_service import clear_otp, generate_otp, verify_otp
from app.utils.errors import (
    ConflictError,
    DependencyFailureError,
    ExpiredError,
    InvalidInputError,
    NotFoundError,
)
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin-requests", tags=["Admin Requests"])

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


def _get_pending_request(db: Session, request_id: int) -> AdminRequest:
    admin_request = db.query(AdminRequest).filter(AdminRequest.id == request_id).first()
    if not admin_request or admin_request.status != PENDING:
        raise NotFoundError("Admin request not found or already processed")
    return admin_request


def _mark_reviewed(admin_request: AdminRequest, new_status: str, reviewer: Principal) -> None:
    admin_request.status = new_status
    admin_request.reviewed_by = reviewer.id
    admin_request.reviewed_at = datetime.utcnow()
    clear_otp(admin_request)


@router.post("/send-otp")
def send_request_otp(body: EmailOnly, db: Session = Depends(get_db)):
    try:
        if db.query(Admin).filter(Admin.email == body.email).first():
            raise ConflictError("This email is already registered as admin")

        admin_request = db.query(AdminRequest).filter(AdminRequest.email == body.email).first()
        if admin_request and admin_request.status != PENDING:
            raise ConflictError(f"Admin request already {admin_request.status}")
        if not admin_request:
            admin_request = AdminRequest(email=body.email)
            db.add(admin_request)

        otp = generate_otp(admin_request)
        db.commit()

        if not send_email_otp(body.email, otp, admin_request.name or ""):
            raise DependencyFailureError("Failed to send verification email")

        return create_response(
            message="OTP sent successfully",
            data={"email": body.email},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to send OTP")


@router.post("/verify-otp")
def verify_request_otp(body: VerifyOtp, db: Session = Depends(get_db)):
    try:
        admin_request = db.query(AdminRequest).filter(AdminRequest.email == body.email).first()
        if not admin_request:
            raise NotFoundError("Admin request not found")
        if not verify_otp(admin_request, body.otp):
            raise ExpiredError()

        admin_request.email_verified = True
        clear_otp(admin_request)
        db.commit()

        return create_response(
            message="Email verified successfully",
            data={"email": admin_request.email, "email_verified": True},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "OTP verification failed")


@router.post("/submit")
def submit_request(body: AdminRequestSubmit, db: Session = Depends(get_db)):
    try:
        admin_request = db.query(AdminRequest).filter(AdminRequest.email == body.email).first()
        if not admin_request or not admin_request.email_verified:
            raise InvalidInputError("Please verify your email first")
        if admin_request.status != PENDING:
            raise ConflictError(f"Admin request already {admin_request.status}")

        admin_request.name = body.name.strip()
        admin_request.roll_no = body.roll_no.strip()
        admin_request.branch = body.branch.strip()
        admin_request.year = body.year.strip()
        admin_request.phone = body.phone.strip()
        admin_request.password = hash_password(body.password)
        db.commit()
        db.refresh(admin_request)

        logger.info("Admin request id=%s submitted", admin_request.id)
        return create_response(
            message="Admin request submitted successfully",
            data={"request_id": admin_request.id, "status": admin_request.status},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to submit request")


@router.get("")
def list_pending_requests(
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        requests = (
            db.query(AdminRequest)
            .filter(AdminRequest.status == PENDING)
            .order_by(AdminRequest.created_at.desc(), AdminRequest.id.desc())
            .all()
        )
        payload = [AdminRequestResponse.model_validate(item).model_dump() for item in requests]
        return create_response(
            message="Admin requests fetched successfully",
            data={"count": len(payload), "requests": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch admin requests")


@router.post("/approve/{request_id}")
def approve_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        admin_request = _get_pending_request(db, request_id)

        missing_fields = admin_request.missing_profile_fields()
        if missing_fields:
            raise InvalidInputError(
                "Admin request is incomplete. Missing required information: " + ", ".join(missing_fields)
            )
        if not admin_request.email_verified:
            raise InvalidInputError("Admin request email has not been verified")
        if db.query(Admin).filter(Admin.email == admin_request.email).first():
            raise ConflictError("This email is already registered as admin")

        # Stored password is already a bcrypt hash
        admin = Admin(
            name=admin_request.name,
            email=admin_request.email,
            password=admin_request.password,
            role=AdminRole.normal.value,
        )
        db.add(admin)
        _mark_reviewed(admin_request, APPROVED, current_admin)
        db.commit()
        db.refresh(admin)

        logger.info("Admin request id=%s approved by admin id=%s", admin_request.id, current_admin.id)
        if not send_admin_decision_email(admin_request.email, admin_request.name, approved=True):
            logger.warning("Approval email for request id=%s was not delivered", admin_request.id)

        return create_response(
            message="Admin request approved successfully",
            data={"request_id": admin_request.id, "admin_id": admin.id, "status": admin_request.status},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to approve request")


@router.post("/reject/{request_id}")
def reject_request(
    request_id: int,
    body: AdminRequestReject | None = None,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        admin_request = _get_pending_request(db, request_id)
        reason = body.reason if body else None

        _mark_reviewed(admin_request, REJECTED, current_admin)
        admin_request.rejection_reason = reason
        db.commit()

        logger.info("Admin request id=%s rejected by admin id=%s", admin_request.id, current_admin.id)
        if not send_admin_decision_email(admin_request.email, admin_request.name, approved=False, reason=reason):
            logger.warning("Rejection email for request id=%s was not delivered", admin_request.id)

        return create_response(
            message="Admin request rejected successfully",
            data={"request_id": admin_request.id, "status": admin_request.status},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to reject request")
