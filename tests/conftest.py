import os
from datetime import date, datetime, timedelta

import pytest

# Configure the application before it is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ["RATE_LIMIT_REQUESTS"] = "1000"

from fastapi.testclient import TestClient

from clinic_booking.main import app
from clinic_booking.api.deps import get_mailer
from clinic_booking.core.database import Base, SessionLocal, engine, get_redis
from clinic_booking.core.mailer import Mailer, MailDeliveryError
from clinic_booking.core.config import get_settings
from clinic_booking.core.security import UserRole, get_password_hash
from clinic_booking.models import Clinic, User


class FakeRedis:
    """In-memory stand-in for the few Redis commands the rate limiter uses."""

    def __init__(self):
        self.data = {}

    def incr(self, key):
        self.data[key] = int(self.data.get(key, 0)) + 1
        return self.data[key]

    def expire(self, key, seconds):
        return key in self.data


class RecordingMailer(Mailer):
    def __init__(self):
        super().__init__(get_settings())
        self.sent = []
        self.fail = False

    def send(self, to_address, subject, body):
        if self.fail:
            raise MailDeliveryError("SMTP server unavailable")
        self.sent.append({"to": to_address, "subject": subject, "body": body})


@pytest.fixture(scope="function")
def test_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def client(test_db, mailer, fake_redis):
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_redis] = lambda: fake_redis
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(test_db):
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def future_slot(days: int = 7, hour: int = 10, minute: int = 0) -> str:
    day = date.today() + timedelta(days=days)
    return datetime(day.year, day.month, day.day, hour, minute).isoformat()


def register(client, email, role="patient", name=None, password="Password123", **extra):
    payload = {
        "name": name or email.split("@")[0].title(),
        "email": email,
        "password": password,
        "role": role,
    }
    payload.update(extra)
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["user"]


def login(client, email, password="Password123"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def clinic(db_session):
    clinic = Clinic(name="Central Clinic", location="Main Street 1")
    db_session.add(clinic)
    db_session.commit()
    db_session.refresh(clinic)
    return {"id": clinic.id, "name": clinic.name, "location": clinic.location}


@pytest.fixture
def admin_headers(client, db_session):
    admin = User(
        name="Admin",
        email="admin@example.com",
        password_hash=get_password_hash("AdminPass123"),
        role=UserRole.ADMIN,
    )
    db_session.add(admin)
    db_session.commit()
    data = login(client, "admin@example.com", "AdminPass123")
    return auth_headers(data["access_token"])


@pytest.fixture
def patient(client):
    user = register(client, "patient@example.com", role="patient", name="Pat Patient")
    data = login(client, "patient@example.com")
    return {"user": user, "headers": auth_headers(data["access_token"])}


@pytest.fixture
def doctor(client, clinic):
    user = register(
        client, "doctor@example.com", role="doctor", name="Dr. Who",
        specialization="Cardiology", clinic_id=clinic["id"],
    )
    data = login(client, "doctor@example.com")
    return {
        "user": user,
        "profile": data["doctor_profile"],
        "headers": auth_headers(data["access_token"]),
    }
