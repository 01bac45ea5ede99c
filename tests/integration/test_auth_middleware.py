"""Integration tests for AuthMiddleware."""

import time

import fakeredis.aioredis
import jwt
from httpx import AsyncClient

from app.core.config import settings
from tests.conftest import make_token

STREAM_URL = "/api/v1/chat/stream"
BODY = {"message": "hello", "agent_id": "agent-1"}


class TestPublicPaths:
    """Tests that public paths are accessible without auth."""

    async def test_health_check(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"status": "healthy"}

    async def test_root(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/")
        assert resp.status_code == 200

    async def test_docs(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/docs")
        assert resp.status_code == 200

    async def test_openapi_lists_stream_endpoints(
        self, async_client: AsyncClient
    ) -> None:
        resp = await async_client.get("/openapi.json")
        paths = resp.json()["paths"]
        assert STREAM_URL in paths
        assert "/api/v1/admin/chat/stream" in paths


class TestProtectedPaths:
    """Tests that protected paths require auth."""

    async def test_without_token(self, async_client: AsyncClient) -> None:
        resp = await async_client.post(STREAM_URL, json=BODY)
        assert resp.status_code == 401
        data = resp.json()
        assert data["status"] == 401
        assert data["code"] == "MISSING_TOKEN"

    async def test_invalid_token(self, async_client: AsyncClient) -> None:
        resp = await async_client.post(
            STREAM_URL,
            json=BODY,
            headers={"Authorization": "Bearer invalid.token.here"},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "INVALID_TOKEN"

    async def test_wrong_secret(self, async_client: AsyncClient) -> None:
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        resp = await async_client.post(
            STREAM_URL, json=BODY, headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.json()["code"] == "INVALID_TOKEN"

    async def test_expired_token(self, async_client: AsyncClient) -> None:
        token = make_token(exp=int(time.time()) - 60)
        resp = await async_client.post(
            STREAM_URL, json=BODY, headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "TOKEN_EXPIRED"

    async def test_token_without_subject(self, async_client: AsyncClient) -> None:
        token = jwt.encode(
            {"email": "x@test.com"},
            settings.auth.secret_key.get_secret_value(),
            algorithm=settings.auth.algorithm,
        )
        resp = await async_client.post(
            STREAM_URL, json=BODY, headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 401
        assert resp.json()["message"] == "Token has no subject"

    async def test_revoked_token(
        self,
        async_client: AsyncClient,
        fake_redis: fakeredis.aioredis.FakeRedis,
    ) -> None:
        token = make_token(jti="revoked-jti")
        await fake_redis.set(settings.redis.revoked_key("revoked-jti"), "1")

        resp = await async_client.post(
            STREAM_URL, json=BODY, headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == "TOKEN_BLACKLISTED"

    async def test_valid_token_passes(self, async_client: AsyncClient) -> None:
        token = make_token()
        resp = await async_client.post(
            STREAM_URL,
            json={"message": ""},
            headers={"Authorization": f"Bearer {token}"},
        )
        # Reaches turn validation.
        assert resp.status_code == 400

    async def test_unknown_role_forbidden(self, async_client: AsyncClient) -> None:
        token = make_token(role="guest")
        resp = await async_client.post(
            STREAM_URL, json=BODY, headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "AUTHORIZATION_ERROR"

    async def test_missing_role_claim_defaults_to_user(
        self, async_client: AsyncClient
    ) -> None:
        token = jwt.encode(
            {"sub": "user-1", "email": "x@test.com"},
            settings.auth.secret_key.get_secret_value(),
            algorithm=settings.auth.algorithm,
        )
        resp = await async_client.post(
            STREAM_URL,
            json={"message": ""},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert resp.status_code == 400
