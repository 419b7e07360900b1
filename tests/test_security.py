"""
Tests for password hashing, tokens, login and logout
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError

from shutterbook.config import settings
from shutterbook.core.exceptions import AuthenticationError
from shutterbook.core.redis import TokenBlacklist
from shutterbook.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    remaining_lifetime,
    verify_password,
)
from tests.factories import TEST_PASSWORD, create_customer, create_user

AUTH = "/api/v1/auth"


class TestPasswordHashing:

    def test_hash_and_verify(self):
        hashed = get_password_hash("TestPassword123!")

        assert hashed != "TestPassword123!"
        assert hashed.startswith("$2b$")
        assert verify_password("TestPassword123!", hashed) is True
        assert verify_password("WrongPassword123!", hashed) is False


class TestTokens:

    def test_access_token_claims(self):
        token = create_access_token("7d1c8f2e-0000-4000-8000-000000000001", "customer")
        payload = decode_token(token)

        assert payload["sub"] == "7d1c8f2e-0000-4000-8000-000000000001"
        assert payload["principal"] == "customer"
        assert payload["type"] == "access"
        assert len(payload["jti"]) == 32
        assert 0 < remaining_lifetime(payload) <= settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_tokens_have_distinct_ids(self):
        first = decode_token(create_access_token("subject", "user"))
        second = decode_token(create_access_token("subject", "user"))

        assert first["jti"] != second["jti"]

    def test_expired_token(self):
        token = create_access_token("subject", "user", expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "subject"}, "some-other-secret-that-is-long-enough", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            decode_token(token)


class TestTokenBlacklist:

    @pytest.mark.asyncio
    async def test_add_and_contains(self, redis_client):
        blacklist = TokenBlacklist(redis_client)

        assert await blacklist.contains("abc") is False
        await blacklist.add("abc", 120)
        assert await blacklist.contains("abc") is True
        redis_client.setex.assert_awaited_with("blacklist:abc", 120, "1")

    @pytest.mark.asyncio
    async def test_contains_fails_open(self):
        client = AsyncMock()
        client.exists.side_effect = RedisConnectionError("down")

        assert await TokenBlacklist(client).contains("abc") is False


class TestAuthEndpoints:

    @pytest.mark.asyncio
    async def test_admin_login(self, client: AsyncClient, admin_user):
        response = await client.post(
            f"{AUTH}/login",
            data={"username": admin_user.email, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token_type"] == "bearer"
        assert decode_token(data["access_token"])["principal"] == "user"
        assert decode_token(data["refresh_token"])["type"] == "refresh"

    @pytest.mark.asyncio
    async def test_admin_login_wrong_password(self, client: AsyncClient, admin_user):
        response = await client.post(
            f"{AUTH}/login",
            data={"username": admin_user.email, "password": "nope"},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Incorrect email or password"

    @pytest.mark.asyncio
    async def test_deactivated_admin_cannot_login(self, client: AsyncClient, db_session, admin_role):
        user = await create_user(db_session, admin_role, is_active=False)

        response = await client.post(
            f"{AUTH}/login",
            data={"username": user.email, "password": TEST_PASSWORD},
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Account is deactivated"

    @pytest.mark.asyncio
    async def test_customer_login(self, client: AsyncClient, customer):
        response = await client.post(
            f"{AUTH}/customer/login",
            json={"email": customer.email, "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        assert decode_token(response.json()["data"]["access_token"])["principal"] == "customer"

    @pytest.mark.asyncio
    async def test_deactivated_customer_token_rejected(self, client: AsyncClient, db_session):
        customer = await create_customer(db_session, is_active=False)
        token = create_access_token(str(customer.id), "customer")

        response = await client.get(
            "/api/v1/client/transactions/my-transactions",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_refresh_token_rejected_for_access(self, client: AsyncClient, admin_user):
        token = create_refresh_token(str(admin_user.id), "user")

        response = await client.get(f"{AUTH}/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token type. Expected access"

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, admin_headers, customer_headers, admin_user, customer):
        admin = await client.get(f"{AUTH}/me", headers=admin_headers)
        assert admin.status_code == 200
        assert admin.json()["data"]["principal"] == "user"
        assert admin.json()["data"]["role"]["permissions"] == ["*"]

        me = await client.get(f"{AUTH}/me", headers=customer_headers)
        assert me.status_code == 200
        assert me.json()["data"]["email"] == customer.email
        assert me.json()["data"]["customer_no"] == customer.customer_no

    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, client: AsyncClient, admin_headers, redis_client):
        response = await client.post(f"{AUTH}/logout", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Successfully logged out"
        assert any(key.startswith("blacklist:") for key in redis_client.store)

        again = await client.get("/api/v1/admin/transactions", headers=admin_headers)
        assert again.status_code == 401
        assert again.json()["message"] == "Token has been invalidated"


class TestHealth:

    @pytest.mark.asyncio
    async def test_live(self, client: AsyncClient):
        response = await client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test_ready(self, client: AsyncClient):
        response = await client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"
        assert response.json()["checks"] == {"database": True, "redis": True}
