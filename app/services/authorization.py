"""Role-based access decisions.

``authorize`` is the single decision table every guarded route goes through.
It is pure: the caller resolves the principal, this module only decides.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from fastapi import status


class Role(str, Enum):
    """Tokens a route may declare in its required-role set."""

    user = "user"
    admin = "admin"
    superadmin = "superadmin"


class PrincipalKind(str, Enum):
    user = "user"
    admin = "admin"


class AdminRole(str, Enum):
    normal = "normal"
    main = "main"


class DenialReason(Enum):
    NO_TOKEN = (status.HTTP_401_UNAUTHORIZED, "Access denied. No token provided.")
    INVALID_TOKEN = (status.HTTP_401_UNAUTHORIZED, "Token is not valid.")
    INSUFFICIENT_PERMISSIONS = (status.HTTP_403_FORBIDDEN, "Access denied. Insufficient permissions.")
    SUPER_ADMIN_REQUIRED = (status.HTTP_403_FORBIDDEN, "Access denied. Super admin privileges required.")
    INVALID_USER_TYPE = (status.HTTP_403_FORBIDDEN, "Access denied. Invalid user type.")

    @property
    def status_code(self) -> int:
        return self.value[0]

    @property
    def message(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class AuthDecision:
    permitted: bool
    reason: DenialReason | None = None

    def __bool__(self) -> bool:
        return self.permitted


PERMIT = AuthDecision(True)


def _coerce(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def authorize(
    principal_kind: PrincipalKind | str | None,
    principal_role: AdminRole | str | None,
    required_roles: Iterable[Role | str],
) -> AuthDecision:
    if principal_kind is None:
        return AuthDecision(False, DenialReason.NO_TOKEN)

    kind = _coerce(PrincipalKind, principal_kind)
    required = {_coerce(Role, role) for role in required_roles}

    if kind is PrincipalKind.user:
        if Role.user in required:
            return PERMIT
        return AuthDecision(False, DenialReason.INSUFFICIENT_PERMISSIONS)

    if kind is PrincipalKind.admin:
        role = _coerce(AdminRole, principal_role)
        # Super admin overrides every route, including an empty required set
        if role is AdminRole.main:
            return PERMIT
        if role is AdminRole.normal:
            if Role.admin not in required:
                return AuthDecision(False, DenialReason.INSUFFICIENT_PERMISSIONS)
            if Role.superadmin in required:
                return AuthDecision(False, DenialReason.SUPER_ADMIN_REQUIRED)
            return PERMIT
        return AuthDecision(False, DenialReason.INSUFFICIENT_PERMISSIONS)

    return AuthDecision(False, DenialReason.INVALID_USER_TYPE)
