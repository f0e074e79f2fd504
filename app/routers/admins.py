import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import update
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.admin import Admin
from app.models.admin_request import AdminRequest
from app.models.donor import Donor
from app.models.form import RegistrationForm
from app.models.notice import Notice
from app.models.user import User
from app.schemas.admin import AdminCreate, AdminResponse, AdminUpdate
from app.services.auth_middleware import Principal, get_current_principal, get_current_super_admin
from app.services.auth_service import hash_password
from app.services.authorization import AdminRole
from app.utils.errors import ConflictError, InvalidInputError, NotFoundError
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

# Mounted under both /api/admin and /api/admins
router = APIRouter(tags=["Admins"])


def _get_admin(db: Session, admin_id: int) -> Admin:
    admin = db.query(Admin).filter(Admin.id == admin_id).first()
    if not admin:
        raise NotFoundError("Admin not found")
    return admin


def _super_admin_count(db: Session) -> int:
    return db.query(Admin).filter(Admin.role == AdminRole.main.value).count()


def _detach_admin_references(db: Session, admin_id: int) -> None:
    # Authored content and review history outlive the admin account
    db.execute(update(Notice).where(Notice.author_id == admin_id).values(author_id=None))
    db.execute(update(RegistrationForm).where(RegistrationForm.created_by == admin_id).values(created_by=None))
    db.execute(update(AdminRequest).where(AdminRequest.reviewed_by == admin_id).values(reviewed_by=None))


@router.get("")
def list_admins(
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        admins = db.query(Admin).order_by(Admin.created_at.desc(), Admin.id.desc()).all()
        payload = [AdminResponse.model_validate(admin).model_dump() for admin in admins]
        return create_response(
            message="Admins fetched successfully",
            data={"count": len(payload), "admins": payload},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch admins")


@router.post("")
def create_admin(
    body: AdminCreate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        if db.query(Admin).filter(Admin.email == body.email).first():
            raise ConflictError("Admin with this email already exists")

        admin = Admin(
            name=body.name.strip(),
            email=body.email,
            password=hash_password(body.password),
            role=body.role.value,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)

        logger.info("Admin id=%s (%s) created by admin id=%s", admin.id, admin.role, current_admin.id)
        return create_response(
            message="Admin created successfully",
            data=AdminResponse.model_validate(admin).model_dump(),
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to create admin")


@router.put("/{admin_id}")
def update_admin(
    admin_id: int,
    body: AdminUpdate,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        admin = _get_admin(db, admin_id)

        if admin.role == AdminRole.main.value and admin.id != current_admin.id:
            raise InvalidInputError("Cannot edit other super admins")

        if admin.role == AdminRole.main.value and body.role and body.role != AdminRole.main:
            if _super_admin_count(db) <= 1:
                raise InvalidInputError("Cannot demote the last super admin. At least one super admin must exist.")

        if body.email and body.email != admin.email:
            if db.query(Admin).filter(Admin.email == body.email, Admin.id != admin.id).first():
                raise ConflictError("Email already exists")
            admin.email = body.email
        if body.name:
            admin.name = body.name.strip()
        if body.role:
            admin.role = body.role.value

        db.commit()
        db.refresh(admin)

        return create_response(
            message="Admin updated successfully",
            data=AdminResponse.model_validate(admin).model_dump(),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to update admin")


@router.delete("/{admin_id}")
def remove_admin(
    admin_id: int,
    db: Session = Depends(get_db),
    current_admin: Principal = Depends(get_current_super_admin),
):
    try:
        admin = _get_admin(db, admin_id)
        if admin.role == AdminRole.main.value and _super_admin_count(db) <= 1:
            raise InvalidInputError("Cannot remove the last super admin. At least one super admin must exist.")

        _detach_admin_references(db, admin.id)
        db.delete(admin)
        db.commit()

        logger.info("Admin id=%s removed by admin id=%s", admin_id, current_admin.id)
        return create_response(
            message="Admin removed successfully",
            data={"deleted": True, "admin_id": admin_id},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to remove admin")


@router.get("/stats")
def dashboard_stats(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    try:
        stats = {
            "total_donors": db.query(Donor).filter(Donor.is_active.is_(True)).count(),
            "total_notices": db.query(Notice).filter(Notice.is_active.is_(True)).count(),
            "total_forms": db.query(RegistrationForm).filter(RegistrationForm.is_active.is_(True)).count(),
            "total_users": db.query(User).filter(User.verified.is_(True)).count(),
        }
        return create_response(
            message="Dashboard statistics fetched",
            data=stats,
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to fetch dashboard statistics")
