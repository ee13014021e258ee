from datetime import datetime, timedelta
import re

from clinic_booking.models import User
from clinic_booking.services.recovery_service import generate_reset_code

from .conftest import login, register


def _stored_user(db_session, email):
    db_session.expire_all()
    return db_session.query(User).filter(User.email == email).one()


class TestResetCode:

    def test_generated_codes_are_six_digits(self):
        for _ in range(50):
            assert re.fullmatch(r"\d{6}", generate_reset_code())


class TestForgotPassword:

    def test_unknown_email(self, client, mailer):
        response = client.post("/api/auth/forgot-password", json={"email": "a@x.com"})
        assert response.status_code == 404
        assert "error" in response.json()
        assert mailer.sent == []

    def test_issues_code_with_fifteen_minute_expiry(self, client, mailer, db_session):
        register(client, "reset@example.com")
        before = datetime.now()

        response = client.post("/api/auth/forgot-password", json={"email": "reset@example.com"})
        assert response.status_code == 200

        user = _stored_user(db_session, "reset@example.com")
        assert re.fullmatch(r"\d{6}", user.reset_code)
        expected = before + timedelta(minutes=15)
        assert abs((user.reset_code_expires - expected).total_seconds()) < 60

        assert len(mailer.sent) == 1
        assert mailer.sent[0]["to"] == "reset@example.com"
        assert user.reset_code in mailer.sent[0]["body"]

    def test_delivery_failure_clears_code(self, client, mailer, db_session):
        register(client, "nomail@example.com")
        mailer.fail = True

        response = client.post("/api/auth/forgot-password", json={"email": "nomail@example.com"})
        assert response.status_code == 400
        assert "Failed to send" in response.json()["error"]

        user = _stored_user(db_session, "nomail@example.com")
        assert user.reset_code is None
        assert user.reset_code_expires is None


class TestResetPassword:

    def _request_code(self, client, db_session, email):
        client.post("/api/auth/forgot-password", json={"email": email})
        return _stored_user(db_session, email).reset_code

    def test_reset_with_valid_code(self, client, db_session):
        register(client, "ok@example.com")
        code = self._request_code(client, db_session, "ok@example.com")

        response = client.post(
            "/api/auth/reset-password",
            json={"email": "ok@example.com", "code": code, "new_password": "BrandNew123"},
        )
        assert response.status_code == 200

        user = _stored_user(db_session, "ok@example.com")
        assert user.reset_code is None
        assert user.reset_code_expires is None
        login(client, "ok@example.com", "BrandNew123")

    def test_code_cannot_be_reused(self, client, db_session):
        register(client, "once@example.com")
        code = self._request_code(client, db_session, "once@example.com")
        payload = {"email": "once@example.com", "code": code, "new_password": "BrandNew123"}

        assert client.post("/api/auth/reset-password", json=payload).status_code == 200
        response = client.post("/api/auth/reset-password", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid reset code"

    def test_wrong_code(self, client, db_session):
        register(client, "wrong@example.com")
        code = self._request_code(client, db_session, "wrong@example.com")
        wrong = "000000" if code != "000000" else "111111"

        response = client.post(
            "/api/auth/reset-password",
            json={"email": "wrong@example.com", "code": wrong, "new_password": "BrandNew123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid reset code"
        # The original password still works
        login(client, "wrong@example.com")

    def test_non_ascii_code_is_rejected(self, client, db_session):
        register(client, "accent@example.com")
        self._request_code(client, db_session, "accent@example.com")

        response = client.post(
            "/api/auth/reset-password",
            json={"email": "accent@example.com", "code": "12345\u00e9", "new_password": "BrandNew123"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid reset code"
        assert _stored_user(db_session, "accent@example.com").reset_code is not None

    def test_no_code_requested(self, client):
        register(client, "never@example.com")
        response = client.post(
            "/api/auth/reset-password",
            json={"email": "never@example.com", "code": "123456", "new_password": "BrandNew123"},
        )
        assert response.status_code == 400

    def test_unknown_user(self, client):
        response = client.post(
            "/api/auth/reset-password",
            json={"email": "ghost@example.com", "code": "123456", "new_password": "BrandNew123"},
        )
        assert response.status_code == 404

    def test_expired_code(self, client, db_session):
        register(client, "slow@example.com")
        code = self._request_code(client, db_session, "slow@example.com")

        user = _stored_user(db_session, "slow@example.com")
        user.reset_code_expires = datetime.now() - timedelta(seconds=1)
        db_session.commit()

        response = client.post(
            "/api/auth/reset-password",
            json={"email": "slow@example.com", "code": code, "new_password": "BrandNew123"},
        )
        assert response.status_code == 400
        assert "expired" in response.json()["error"]

        user = _stored_user(db_session, "slow@example.com")
        assert user.reset_code is None
        login(client, "slow@example.com")
