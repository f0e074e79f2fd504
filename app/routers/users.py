import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.admin import Admin
from app.models.user import User
from app.schemas.user import EmailOnly, LoginRequest, PrincipalResponse, SignupRequest, VerifyOtp
from app.services.auth_middleware import Principal, get_current_principal
from app.services.auth_service import create_principal_token, hash_password, verify_password
from app.services.authorization import AdminRole, PrincipalKind, Role
from app.services.email_services import send_email_otp
from app.services.otp_service import clear_otp, generate_otp, verify_otp
from app.utils.errors import (
    ConflictError,
    DependencyFailureError,
    ExpiredError,
    NotFoundError,
    UnauthenticatedError,
)
from app.utils.response import create_response, handle_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])

ADMIN_LOGIN_ROLES = {Role.admin.value, Role.superadmin.value}


def _principal_payload(account, kind: PrincipalKind) -> dict:
    role = account.role if kind is PrincipalKind.admin else PrincipalKind.user.value
    return PrincipalResponse(id=account.id, name=account.name, email=account.email, role=role).model_dump()


def _login_payload(account, kind: PrincipalKind) -> dict:
    return {
        "token": create_principal_token(account.id, kind.value),
        "token_type": "bearer",
        "user": _principal_payload(account, kind),
    }


def _get_user_by_email(db: Session, email: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")
    return user


@router.post("/signup")
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    try:
        if db.query(User).filter(User.email == body.email).first():
            raise ConflictError("User already exists with this email")
        if db.query(Admin).filter(Admin.email == body.email).first():
            raise ConflictError("This email is already registered as admin")

        user = User(name=body.name.strip(), email=body.email, password=hash_password(body.password))
        otp = generate_otp(user)
        db.add(user)
        db.commit()
        db.refresh(user)

        if not send_email_otp(user.email, otp, user.name):
            db.delete(user)
            db.commit()
            raise DependencyFailureError("Failed to send verification email")

        logger.info("Registered user id=%s", user.id)
        return create_response(
            message="User registered successfully. Please verify your email.",
            data={"user_id": user.id},
            status_code=status.HTTP_201_CREATED,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Registration failed")


@router.post("/verify-otp")
def verify_signup_otp(body: VerifyOtp, db: Session = Depends(get_db)):
    try:
        user = _get_user_by_email(db, body.email)
        if not verify_otp(user, body.otp):
            raise ExpiredError()

        user.verified = True
        clear_otp(user)
        db.commit()

        return create_response(
            message="Email verified successfully",
            data={"email": user.email, "verified": True},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "OTP verification failed")


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    try:
        if body.role in ADMIN_LOGIN_ROLES:
            kind = PrincipalKind.admin
            account = db.query(Admin).filter(Admin.email == body.email).first()
            if body.role == Role.superadmin.value and (not account or account.role != AdminRole.main.value):
                raise UnauthenticatedError("Access denied. Super admin credentials required.")
        else:
            kind = PrincipalKind.user
            account = db.query(User).filter(User.email == body.email).first()
            if account and not account.verified:
                raise UnauthenticatedError("Please verify your email before logging in")

        if not account or not verify_password(body.password, account.password):
            raise UnauthenticatedError("Invalid credentials")

        logger.info("Login succeeded for %s id=%s", kind.value, account.id)
        return create_response(
            message="Login successful",
            data=_login_payload(account, kind),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Login failed")


@router.post("/send-login-otp")
def send_login_otp(body: EmailOnly, db: Session = Depends(get_db)):
    try:
        user = _get_user_by_email(db, body.email)
        otp = generate_otp(user)
        db.commit()

        if not send_email_otp(user.email, otp, user.name):
            raise DependencyFailureError("Failed to send OTP email")

        return create_response(
            message="OTP sent successfully",
            data={"email": user.email},
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "Failed to send OTP")


@router.post("/login-otp")
def login_with_otp(body: VerifyOtp, db: Session = Depends(get_db)):
    try:
        user = _get_user_by_email(db, body.email)
        if not verify_otp(user, body.otp):
            raise ExpiredError()

        user.verified = True
        clear_otp(user)
        db.commit()
        db.refresh(user)

        return create_response(
            message="Login successful",
            data=_login_payload(user, PrincipalKind.user),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        db.rollback()
        return handle_exception(exc, "OTP login failed")


@router.get("/me")
def get_me(principal: Principal = Depends(get_current_principal)):
    try:
        return create_response(
            message="User fetched successfully",
            data=_principal_payload(principal.account, principal.kind),
            status_code=status.HTTP_200_OK,
        )
    except Exception as exc:
        return handle_exception(exc, "Failed to get user data")
