"""
Tests for the authenticated account's profile:
- GET /api/v1/accounts/me
- PATCH /api/v1/accounts/me
- AccountService.get_profile
"""

import dataclasses
import uuid

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from jose import jwt

from postgate.errors import AuthError, AuthErrorReason, NotFoundError
from postgate.services.accounts import AccountService


class TestGetProfile:
    """GET /api/v1/accounts/me tests."""

    async def test_returns_profile(self, async_client: AsyncClient, test_account: dict, auth_headers):
        response = await async_client.get(
            "/api/v1/accounts/me", headers=auth_headers(test_account["token"])
        )
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_account["account_id"]
        assert data["username"] == test_account["username"]
        assert data["email"] == test_account["email"]
        assert data["bio"] is None

    async def test_profile_has_no_password_field(
        self, async_client: AsyncClient, test_account: dict, auth_headers
    ):
        response = await async_client.get(
            "/api/v1/accounts/me", headers=auth_headers(test_account["token"])
        )
        assert set(response.json()) == {"id", "username", "email", "bio", "created_at"}

    async def test_register_then_profile_scenario(self, async_client: AsyncClient, auth_headers):
        """register(alice) -> token -> profile without any password field."""
        registered = await async_client.post(
            "/api/v1/auth/register",
            json={"username": "alice", "email": "alice@x.com", "password": "pw123"},
        )
        token = registered.json()["token"]
        response = await async_client.get("/api/v1/accounts/me", headers=auth_headers(token))
        data = response.json()
        assert data["id"] == registered.json()["account_id"]
        assert data["username"] == "alice"
        assert data["email"] == "alice@x.com"
        assert data["bio"] is None
        assert not any("password" in key for key in data)


class TestProfileRejections:
    """Every failure mode of the gate yields 401 with a reason."""

    async def test_missing_header(self, async_client: AsyncClient):
        response = await async_client.get("/api/v1/accounts/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"
        assert response.json()["error"]["reason"] == "missing_token"

    async def test_wrong_scheme(self, async_client: AsyncClient, test_account: dict):
        response = await async_client.get(
            "/api/v1/accounts/me", headers={"Authorization": f"Token {test_account['token']}"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["reason"] == "missing_token"

    async def test_malformed_token(self, async_client: AsyncClient, auth_headers):
        response = await async_client.get("/api/v1/accounts/me", headers=auth_headers("garbage"))
        assert response.status_code == 401
        assert response.json()["error"]["reason"] == "malformed"

    async def test_forged_token(self, async_client: AsyncClient, test_account: dict, auth_headers, clock):
        now = int(clock.now().timestamp())
        forged = jwt.encode(
            {"sub": test_account["account_id"], "iat": now, "exp": now + 60, "type": "access"},
            "attacker-secret",
            algorithm="HS256",
        )
        response = await async_client.get("/api/v1/accounts/me", headers=auth_headers(forged))
        assert response.status_code == 401
        assert response.json()["error"]["reason"] == "invalid_signature"

    async def test_expired_token(self, async_client: AsyncClient, test_account: dict, auth_headers, clock):
        clock.advance(hours=1, seconds=1)
        response = await async_client.get(
            "/api/v1/accounts/me", headers=auth_headers(test_account["token"])
        )
        assert response.status_code == 401
        assert response.json()["error"]["reason"] == "expired"

    async def test_token_just_before_expiry_still_works(
        self, async_client: AsyncClient, test_account: dict, auth_headers, clock
    ):
        clock.advance(minutes=59, seconds=59)
        response = await async_client.get(
            "/api/v1/accounts/me", headers=auth_headers(test_account["token"])
        )
        assert response.status_code == 200

    async def test_token_for_unknown_account_returns_404(
        self, app: FastAPI, async_client: AsyncClient, auth_headers
    ):
        token = app.state.token_service.issue(str(uuid.uuid4()))
        response = await async_client.get("/api/v1/accounts/me", headers=auth_headers(token))
        assert response.status_code == 404


class TestUpdateProfile:
    """PATCH /api/v1/accounts/me tests."""

    async def test_update_bio(self, async_client: AsyncClient, test_account: dict, auth_headers):
        response = await async_client.patch(
            "/api/v1/accounts/me",
            json={"bio": "Hello there"},
            headers=auth_headers(test_account["token"]),
        )
        assert response.status_code == 200
        assert response.json()["bio"] == "Hello there"

        again = await async_client.get(
            "/api/v1/accounts/me", headers=auth_headers(test_account["token"])
        )
        assert again.json()["bio"] == "Hello there"

    async def test_clear_bio(self, async_client: AsyncClient, test_account: dict, auth_headers):
        await async_client.patch(
            "/api/v1/accounts/me", json={"bio": "temp"}, headers=auth_headers(test_account["token"])
        )
        response = await async_client.patch(
            "/api/v1/accounts/me", json={"bio": None}, headers=auth_headers(test_account["token"])
        )
        assert response.json()["bio"] is None

    async def test_username_and_email_are_immutable(
        self, async_client: AsyncClient, test_account: dict, auth_headers
    ):
        """Extra fields are ignored; identity fields never change."""
        response = await async_client.patch(
            "/api/v1/accounts/me",
            json={"username": "hijack", "email": "hijack@example.com", "bio": "x"},
            headers=auth_headers(test_account["token"]),
        )
        data = response.json()
        assert data["username"] == test_account["username"]
        assert data["email"] == test_account["email"]

    async def test_update_requires_auth(self, async_client: AsyncClient):
        response = await async_client.patch("/api/v1/accounts/me", json={"bio": "x"})
        assert response.status_code == 401

    async def test_overlong_bio_returns_422(
        self, async_client: AsyncClient, test_account: dict, auth_headers
    ):
        response = await async_client.patch(
            "/api/v1/accounts/me",
            json={"bio": "x" * 2001},
            headers=auth_headers(test_account["token"]),
        )
        assert response.status_code == 422


class TestGetProfileService:
    """AccountService.get_profile called directly."""

    async def test_alice_scenario(self, account_service: AccountService):
        registered = await account_service.register_account("alice", "alice@x.com", "pw123")
        profile = await account_service.get_profile(registered.token)
        assert dataclasses.asdict(profile) == {
            "id": registered.account_id,
            "username": "alice",
            "email": "alice@x.com",
            "bio": None,
            "created_at": profile.created_at,
        }

    async def test_bad_token_raises_auth_error(self, account_service: AccountService):
        with pytest.raises(AuthError) as exc_info:
            await account_service.get_profile("not-a-token")
        assert exc_info.value.reason == AuthErrorReason.MALFORMED

    async def test_unknown_account_raises_not_found(self, account_service: AccountService):
        token = account_service.tokens.issue(str(uuid.uuid4()))
        with pytest.raises(NotFoundError):
            await account_service.get_profile(token)
