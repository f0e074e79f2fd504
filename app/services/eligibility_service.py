from dataclasses import dataclass
from datetime import datetime, timedelta

from app.config import settings

COOLDOWN_DAYS = settings.DONATION_COOLDOWN_DAYS
ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class DonorEligibility:
    eligible: bool
    days_remaining: int


def days_since_donation(last_donation: datetime, now: datetime) -> int:
    # Whole elapsed days, floored; partial days never round up
    return (now - last_donation) // ONE_DAY


def is_eligible(last_donation: datetime | None, now: datetime) -> bool:
    if last_donation is None:
        return True
    return days_since_donation(last_donation, now) >= COOLDOWN_DAYS


def days_until_eligible(last_donation: datetime | None, now: datetime) -> int:
    if last_donation is None:
        return 0
    elapsed = days_since_donation(last_donation, now)
    if elapsed >= COOLDOWN_DAYS:
        return 0
    return COOLDOWN_DAYS - elapsed


def donor_eligibility(last_donation: datetime | None, now: datetime | None = None) -> DonorEligibility:
    now = now or datetime.utcnow()
    return DonorEligibility(
        eligible=is_eligible(last_donation, now),
        days_remaining=days_until_eligible(last_donation, now),
    )


def eligibility_cutoff(now: datetime) -> datetime:
    """Latest ``last_donation`` that still leaves a donor eligible at ``now``."""
    return now - timedelta(days=COOLDOWN_DAYS)


def record_donation(donor, now: datetime | None = None) -> datetime:
    donor.last_donation = now or datetime.utcnow()
    return donor.last_donation
