import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure predictable environment variables for tests before importing the app.
BASE_DIR = Path(__file__).resolve().parents[1]
TEST_DB_PATH = BASE_DIR / "test.db"

if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SUPER_ADMIN_EMAIL", "superadmin@mmmut.ac.in")
os.environ.setdefault("SUPER_ADMIN_PASSWORD", "admin123")

import app.main as main  # noqa: E402  (import after env vars are set)
from app.database import Base, SessionLocal, engine  # noqa: E402
from app.models.admin import Admin  # noqa: E402
from app.models.user import User  # noqa: E402
from app.services import email_services, spaces_service  # noqa: E402
from app.services.auth_service import create_principal_token, hash_password  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture outgoing email instead of talking to SMTP."""
    sent = []

    def _fake_send(to_email, subject, html_body):
        sent.append({"to": to_email, "subject": subject, "body": html_body})
        return True

    monkeypatch.setattr(email_services, "send_email", _fake_send)
    return sent


class FakeObjectStore:
    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, **kwargs):
        self.objects[Key] = {"bucket": Bucket, "body": Body, **kwargs}
        return {}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        return {}


@pytest.fixture(autouse=True)
def object_store(monkeypatch):
    store = FakeObjectStore()
    monkeypatch.setattr(spaces_service, "get_client", lambda: store)
    return store


@pytest.fixture()
def client():
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def create_admin(session, email="admin@mmmut.ac.in", role="normal", password="secret123", name="Camp Admin"):
    admin = Admin(name=name, email=email, password=hash_password(password), role=role)
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


def create_user(session, email="student@mmmut.ac.in", password="secret123", verified=True, name="Student"):
    user = User(name=name, email=email, password=hash_password(password), verified=verified)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(account, kind):
    return {"Authorization": f"Bearer {create_principal_token(account.id, kind)}"}


@pytest.fixture()
def super_admin(db):
    return create_admin(db, email="chief@mmmut.ac.in", role="main", name="Chief")


@pytest.fixture()
def normal_admin(db):
    return create_admin(db)


@pytest.fixture()
def end_user(db):
    return create_user(db)


@pytest.fixture()
def super_headers(super_admin):
    return auth_headers(super_admin, "admin")


@pytest.fixture()
def admin_headers(normal_admin):
    return auth_headers(normal_admin, "admin")


@pytest.fixture()
def user_headers(end_user):
    return auth_headers(end_user, "user")
