import logging

from app.config import settings
from app.database import SessionLocal
from app.models.admin import Admin
from app.services.auth_service import hash_password
from app.services.authorization import AdminRole

logger = logging.getLogger(__name__)


def seed_super_admin(db) -> Admin:
    """Make sure at least one super admin (role ``main``) exists."""
    super_admin = db.query(Admin).filter(Admin.role == AdminRole.main.value).first()
    if super_admin:
        logger.info("Super admin already exists: %s (id=%s)", super_admin.email, super_admin.id)
        return super_admin

    email = settings.SUPER_ADMIN_EMAIL.strip().lower()
    existing = db.query(Admin).filter(Admin.email == email).first()
    if existing:
        # Promote the configured account rather than clash on the unique email
        existing.role = AdminRole.main.value
        db.commit()
        logger.info("Promoted %s to super admin", email)
        return existing

    super_admin = Admin(
        name=settings.SUPER_ADMIN_NAME,
        email=email,
        password=hash_password(settings.SUPER_ADMIN_PASSWORD),
        role=AdminRole.main.value,
    )
    db.add(super_admin)
    db.commit()
    db.refresh(super_admin)
    logger.info("Super admin created: %s (id=%s)", super_admin.email, super_admin.id)
    return super_admin


def run_seed():
    db = SessionLocal()
    try:
        seed_super_admin(db)
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
    finally:
        db.close()


if __name__ == "__main__":
    from app.database import Base, engine
    from app.logging_config import setup_logging
    from app.models import admin, admin_request, donor, form, notice, user  # noqa: F401

    setup_logging()
    Base.metadata.create_all(bind=engine)
    run_seed()
