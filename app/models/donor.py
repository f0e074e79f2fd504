from datetime import datetime
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String, Text
from app.database import Base

BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")

# Persisted bound; the donor routes accept a wider range (see ROUTE_MIN_DONOR_AGE)
SCHEMA_MIN_DONOR_AGE = 18
SCHEMA_MAX_DONOR_AGE = 65
DONOR_AGE_CONSTRAINT = "ck_donor_age_range"


class Donor(Base):
    __tablename__ = "donors"
    __table_args__ = (
        CheckConstraint(
            f"age >= {SCHEMA_MIN_DONOR_AGE} AND age <= {SCHEMA_MAX_DONOR_AGE}",
            name=DONOR_AGE_CONSTRAINT,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    roll_no = Column(String(50), nullable=False)
    blood_group = Column(String(3), nullable=False, index=True)
    age = Column(Integer, nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String, nullable=False)
    branch = Column(String(120), nullable=False)
    year = Column(String(20), nullable=False)
    medical_history = Column(Text, nullable=True)
    last_donation = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
