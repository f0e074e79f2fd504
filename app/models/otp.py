from sqlalchemy import Column, DateTime, String


class OtpChallengeMixin:
    """Embedded one-time passcode: a code plus its absolute expiry."""

    otp_code = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)
