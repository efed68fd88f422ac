"""Tests for admin authentication endpoints."""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from app.models.admin import Admin, PasswordResetToken, RevokedToken
from app.utils.security import decode_access_token, hash_secret, verify_secret

REGISTER = {
    "first_name": "Grace",
    "last_name": "Hopper",
    "email": "grace@example.com",
    "password": "correct-horse",
}


def _register_and_login(client):
    client.post("/api/v1/admin/register", json=REGISTER)
    response = client.post(
        "/api/v1/admin/login",
        json={"email": REGISTER["email"], "password": REGISTER["password"]},
    )
    return response.json()["data"]["token"]


def test_register(client, db_session):
    response = client.post("/api/v1/admin/register", json=REGISTER)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Admin registered successfully"
    assert body["data"]["email"] == "grace@example.com"
    assert "password" not in body["data"]

    admin = db_session.query(Admin).one()
    assert admin.password != REGISTER["password"]
    assert verify_secret(REGISTER["password"], admin.password)


def test_register_duplicate_email(client):
    client.post("/api/v1/admin/register", json=REGISTER)

    response = client.post(
        "/api/v1/admin/register",
        json={**REGISTER, "email": "GRACE@example.com"},
    )

    assert response.status_code == 422
    assert response.json()["details"]["email"] == ["The email has already been taken."]


def test_register_short_password(client):
    response = client.post("/api/v1/admin/register", json={**REGISTER, "password": "short"})

    assert response.status_code == 422
    assert "password" in response.json()["details"]


def test_register_password_limit_counts_bytes(client, db_session):
    # 40 characters but 80 UTF-8 bytes
    response = client.post("/api/v1/admin/register", json={**REGISTER, "password": "é" * 40})

    assert response.status_code == 422
    assert response.json()["details"]["password"] == [
        "Value error, The password may not be greater than 72 bytes."
    ]
    assert db_session.query(Admin).count() == 0


def test_login_wrong_password(client):
    client.post("/api/v1/admin/register", json=REGISTER)

    response = client.post(
        "/api/v1/admin/login",
        json={"email": REGISTER["email"], "password": "wrong-password"},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_login_returns_signed_token(client):
    token = _register_and_login(client)

    claims = decode_access_token(token)

    admin_id = client.get(
        "/api/v1/admin/me", headers={"Authorization": f"Bearer {token}"}
    ).json()["data"]["id"]
    assert claims["sub"] == str(admin_id)
    assert claims["jti"]
    assert claims["exp"] > claims["iat"]


def test_me(client):
    token = _register_and_login(client)

    response = client.get("/api/v1/admin/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["data"]["first_name"] == "Grace"


def test_me_without_token(client):
    response = client.get("/api/v1/admin/me")

    assert response.status_code == 401
    assert response.json()["error"] == "Token is invalid or expired"


def test_me_with_garbage_token(client):
    response = client.get("/api/v1/admin/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_logout_revokes_token(client, db_session):
    token = _register_and_login(client)
    headers = {"Authorization": f"Bearer {token}"}

    response = client.post("/api/v1/admin/logout", headers=headers)

    assert response.status_code == 200
    assert response.json()["message"] == "Successfully logged out"
    assert db_session.query(RevokedToken).count() == 1
    assert client.get("/api/v1/admin/me", headers=headers).status_code == 401


def test_forgot_password_queues_email(client, db_session):
    client.post("/api/v1/admin/register", json=REGISTER)

    with patch("app.api.admin.send_password_reset_email.delay") as delay:
        response = client.post(
            "/api/v1/admin/forgot-password", json={"email": REGISTER["email"]}
        )

    assert response.status_code == 200
    assert response.json()["message"] == "Password reset link sent successfully."
    email, token = delay.call_args.args
    assert email == REGISTER["email"]
    record = db_session.get(PasswordResetToken, email)
    assert record.token != token
    assert verify_secret(token, record.token)


def test_forgot_password_unknown_email(client):
    with patch("app.api.admin.send_password_reset_email.delay") as delay:
        response = client.post(
            "/api/v1/admin/forgot-password", json={"email": "nobody@example.com"}
        )

    assert response.status_code == 400
    assert response.json() == {"error": "Unable to send password reset link."}
    delay.assert_not_called()


def test_reset_password(client):
    client.post("/api/v1/admin/register", json=REGISTER)
    with patch("app.api.admin.send_password_reset_email.delay") as delay:
        client.post("/api/v1/admin/forgot-password", json={"email": REGISTER["email"]})
    token = delay.call_args.args[1]

    response = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": token,
            "email": REGISTER["email"],
            "password": "brand-new-pass",
            "password_confirmation": "brand-new-pass",
        },
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Password has been successfully reset."
    login = client.post(
        "/api/v1/admin/login",
        json={"email": REGISTER["email"], "password": "brand-new-pass"},
    )
    assert login.status_code == 200

    # The token is single use
    again = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": token,
            "email": REGISTER["email"],
            "password": "another-pass",
            "password_confirmation": "another-pass",
        },
    )
    assert again.status_code == 400


def test_reset_password_wrong_token(client):
    client.post("/api/v1/admin/register", json=REGISTER)
    with patch("app.api.admin.send_password_reset_email.delay"):
        client.post("/api/v1/admin/forgot-password", json={"email": REGISTER["email"]})

    response = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": "guessed",
            "email": REGISTER["email"],
            "password": "brand-new-pass",
            "password_confirmation": "brand-new-pass",
        },
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Unable to reset password."}


def test_reset_password_expired_token(client, db_session):
    client.post("/api/v1/admin/register", json=REGISTER)
    db_session.add(PasswordResetToken(
        email=REGISTER["email"],
        token=hash_secret("old-token"),
        created_at=datetime.now(timezone.utc) - timedelta(days=1),
    ))
    db_session.commit()

    response = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": "old-token",
            "email": REGISTER["email"],
            "password": "brand-new-pass",
            "password_confirmation": "brand-new-pass",
        },
    )

    assert response.status_code == 400


def test_reset_password_confirmation_mismatch(client):
    response = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": "t",
            "email": REGISTER["email"],
            "password": "brand-new-pass",
            "password_confirmation": "different-pass",
        },
    )

    assert response.status_code == 422


def test_reset_password_limit_counts_bytes(client):
    response = client.post(
        "/api/v1/admin/reset-password",
        json={
            "token": "t",
            "email": REGISTER["email"],
            "password": "é" * 40,
            "password_confirmation": "é" * 40,
        },
    )

    assert response.status_code == 422
    assert "password" in response.json()["details"]


def test_show_reset_form(client):
    response = client.get("/api/v1/admin/reset-password/abc123")

    assert response.status_code == 200
    assert response.json() == {
        "message": "Please provide your new password.",
        "data": {"token": "abc123"},
    }
