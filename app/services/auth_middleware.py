from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.admin import Admin
from app.models.user import User
from app.services.auth_service import decode_access_token
from app.services.authorization import DenialReason, PrincipalKind, Role, authorize
from app.utils.errors import UnauthenticatedError, UnauthorizedError


@dataclass
class Principal:
    kind: PrincipalKind
    account: User | Admin

    @property
    def id(self) -> int:
        return self.account.id

    @property
    def role(self) -> str | None:
        return self.account.role if self.kind is PrincipalKind.admin else None

    @property
    def display_role(self) -> str:
        return self.role or PrincipalKind.user.value

    @property
    def is_super_admin(self) -> bool:
        return self.role == "main"


def _raise_denial(reason: DenialReason):
    if reason.status_code == 401:
        raise UnauthenticatedError(reason.message)
    raise UnauthorizedError(reason.message)


def _resolve_principal(token: str, db: Session) -> Principal:
    try:
        payload = decode_access_token(token)
        principal_id = int(payload.get("sub"))
        kind = PrincipalKind(payload.get("type"))
    except (JWTError, TypeError, ValueError):
        _raise_denial(DenialReason.INVALID_TOKEN)

    model = Admin if kind is PrincipalKind.admin else User
    account = db.query(model).filter(model.id == principal_id).first()
    if not account:
        _raise_denial(DenialReason.INVALID_TOKEN)

    return Principal(kind=kind, account=account)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(settings.bearer_scheme),
    db: Session = Depends(get_db),
) -> Principal:
    if credentials is None or not credentials.credentials:
        _raise_denial(DenialReason.NO_TOKEN)
    return _resolve_principal(credentials.credentials, db)


def require_roles(*roles: Role):
    """Build a dependency that admits principals allowed by ``authorize``."""
    required = frozenset(roles)

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        decision = authorize(principal.kind, principal.role, required)
        if not decision:
            _raise_denial(decision.reason)
        return principal

    return dependency


get_current_admin = require_roles(Role.admin)
get_current_super_admin = require_roles(Role.admin, Role.superadmin)
