"""One-time passcode lifecycle for entities carrying ``OtpChallengeMixin``.

A challenge is generated on demand (signup, OTP login, resend, admin request),
checked lazily at verify time, and consumed by the caller once a verify
succeeds. Nothing here touches the database session; callers commit.
"""

import logging
import secrets
from datetime import datetime, timedelta

from app.config import settings

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999
OTP_TTL = timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

_random = secrets.SystemRandom()


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.utcnow()


def generate_otp(target, now: datetime | None = None) -> str:
    """Attach a fresh 6 digit code to ``target`` and return it.

    Any unconsumed challenge is overwritten.
    """
    code = str(_random.randint(OTP_MIN, OTP_MAX))
    target.otp_code = code
    target.otp_expires_at = _now(now) + OTP_TTL
    logger.info("Issued OTP for %s id=%s", type(target).__name__, getattr(target, "id", None))
    return code


def verify_otp(target, candidate, now: datetime | None = None) -> bool:
    code = getattr(target, "otp_code", None)
    expires_at = getattr(target, "otp_expires_at", None)
    if not code or expires_at is None:
        return False
    # Strictly after expiry; the expiry instant itself is still valid
    if _now(now) > expires_at:
        return False
    if not isinstance(candidate, str):
        return False
    return secrets.compare_digest(code.encode("utf-8"), candidate.encode("utf-8"))


def otp_expired(target, now: datetime | None = None) -> bool:
    expires_at = getattr(target, "otp_expires_at", None)
    return expires_at is not None and _now(now) > expires_at


def clear_otp(target) -> None:
    target.otp_code = None
    target.otp_expires_at = None
