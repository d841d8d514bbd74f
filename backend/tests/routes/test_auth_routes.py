# backend/tests/routes/test_auth_routes.py
"""Route tests for /api/v1/auth and /api/v1/users."""

import json

from fastapi import status

from eventbook.models.booking import BookingStatus
from eventbook.services.auth_service import otp_key

BASE = "/api/v1/auth"


def _register(client, email: str = "new.person@example.com"):
    return client.post(
        f"{BASE}/register",
        json={"name": "New Person", "email": email, "password": "secret123", "phone": "+15550199"},
    )


class TestRegistrationFlow:
    def test_register_then_verify(self, client, otp_store):
        response = _register(client)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["email"] == "new.person@example.com"

        code = json.loads(otp_store.get(otp_key("new.person@example.com")))["otp"]
        response = client.post(f"{BASE}/verify-email", json={"email": "new.person@example.com", "otp": code})

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["is_email_verified"] is True
        assert body["user"]["role"] == "user"

        me = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == status.HTTP_200_OK
        assert me.json()["email"] == "new.person@example.com"

    def test_wrong_code(self, client):
        _register(client)
        response = client.post(f"{BASE}/verify-email", json={"email": "new.person@example.com", "otp": "0000"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid OTP"

    def test_existing_account(self, client, test_user):
        response = _register(client, email=test_user.email)
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_resend(self, client, otp_store):
        _register(client)
        response = client.post(f"{BASE}/resend-otp", json={"email": "new.person@example.com"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "New OTP sent to your email"

    def test_resend_without_registration(self, client):
        response = client.post(f"{BASE}/resend-otp", json={"email": "nobody@example.com"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Registration session expired"

    def test_invalid_email_is_rejected(self, client):
        response = client.post(
            f"{BASE}/register", json={"name": "New Person", "email": "not-an-email", "password": "secret123"}
        )
        assert response.status_code == 422


class TestLogin:
    def test_login(self, client, test_user, test_password):
        response = client.post(f"{BASE}/login", json={"email": test_user.email, "password": test_password})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["user"]["id"] == test_user.id

    def test_bad_password(self, client, test_user):
        response = client.post(f"{BASE}/login", json={"email": test_user.email, "password": "wrong-password"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid credentials"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_requires_token(self, client):
        response = client.get(f"{BASE}/me")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Not authenticated"

    def test_garbage_token(self, client):
        response = client.get(f"{BASE}/me", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Could not validate credentials"

    def test_disabled_account_token(self, client, db, test_user, auth_headers_user):
        test_user.is_active = False
        db.commit()
        response = client.get(f"{BASE}/me", headers=auth_headers_user)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Account is disabled"


def _login(client, user, password) -> dict:
    response = client.post(f"{BASE}/login", json={"email": user.email, "password": password})
    assert response.status_code == status.HTTP_200_OK
    return response.json()


class TestRefreshAndLogout:
    def test_login_returns_refresh_token(self, client, test_user, test_password):
        body = _login(client, test_user, test_password)
        assert body["refresh_token"]
        assert body["refresh_token"] != body["access_token"]

    def test_refresh_rotates(self, client, test_user, test_password):
        old = _login(client, test_user, test_password)["refresh_token"]

        response = client.post(f"{BASE}/refresh-token", json={"refresh_token": old})
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        me = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.json()["id"] == test_user.id

        replay = client.post(f"{BASE}/refresh-token", json={"refresh_token": old})
        assert replay.status_code == status.HTTP_403_FORBIDDEN
        assert replay.json()["detail"] == "Refresh token is not valid"

    def test_invalid_refresh_token(self, client):
        response = client.post(f"{BASE}/refresh-token", json={"refresh_token": "not-a-jwt"})
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Invalid or expired refresh token"

    def test_refresh_token_is_not_an_access_token(self, client, test_user, test_password):
        token = _login(client, test_user, test_password)["refresh_token"]
        response = client.get(f"{BASE}/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout(self, client, test_user, test_password, auth_headers_user):
        token = _login(client, test_user, test_password)["refresh_token"]

        response = client.post(f"{BASE}/logout", json={"refresh_token": token}, headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Logged out successfully"

        refreshed = client.post(f"{BASE}/refresh-token", json={"refresh_token": token})
        assert refreshed.status_code == status.HTTP_403_FORBIDDEN

    def test_logout_without_body(self, client, auth_headers_user):
        response = client.post(f"{BASE}/logout", headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK

    def test_logout_requires_authentication(self, client):
        assert client.post(f"{BASE}/logout").status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_all(self, client, test_user, test_password, auth_headers_user):
        first = _login(client, test_user, test_password)["refresh_token"]
        second = _login(client, test_user, test_password)["refresh_token"]

        response = client.post(f"{BASE}/logout-all", headers=auth_headers_user)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {"revoked": 2}

        for token in (first, second):
            refreshed = client.post(f"{BASE}/refresh-token", json={"refresh_token": token})
            assert refreshed.status_code == status.HTTP_403_FORBIDDEN


class TestProfile:
    def test_update_profile(self, client, auth_headers_user):
        response = client.put(
            f"{BASE}/profile", json={"name": "Renamed User", "phone": "+15550111"}, headers=auth_headers_user
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Renamed User"

    def test_wrong_current_password(self, client, auth_headers_user):
        response = client.put(
            f"{BASE}/profile",
            json={"current_password": "wrong", "new_password": "newsecret"},
            headers=auth_headers_user,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestUserDashboard:
    def test_dashboard(self, client, auth_headers_user, test_user, test_service, booking_factory, day):
        booking_factory(test_user, test_service, day(3), day(4), status=BookingStatus.CONFIRMED)
        booking_factory(test_user, test_service, day(6), day(7))

        response = client.get("/api/v1/users/dashboard", headers=auth_headers_user)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["total_bookings"] == 2
        assert body["upcoming_bookings"] == 1
        assert body["total_spent"] == 1000.0
        assert body["bookings_by_status"] == {"confirmed": 1, "pending": 1}
        assert len(body["recent_bookings"]) == 2
