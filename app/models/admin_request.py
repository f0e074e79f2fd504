from datetime import datetime
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.otp import OtpChallengeMixin

PROFILE_FIELDS = ("name", "password", "roll_no", "branch", "year", "phone")


class AdminRequest(OtpChallengeMixin, Base):
    __tablename__ = "admin_requests"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)

    # Filled in by the submit step
    name = Column(String(120), nullable=True)
    roll_no = Column(String(50), nullable=True)
    branch = Column(String(120), nullable=True)
    year = Column(String(20), nullable=True)
    phone = Column(String(30), nullable=True)
    password = Column(String, nullable=True)  # bcrypt hash

    status = Column(String(20), nullable=False, default="pending", index=True)
    email_verified = Column(Boolean, default=False, nullable=False)

    reviewed_by = Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    reviewer = relationship("Admin")

    def missing_profile_fields(self) -> list[str]:
        return [field for field in PROFILE_FIELDS if not getattr(self, field)]
