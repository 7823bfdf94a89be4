# tests/test_auth.py — Authentication tests
import pytest
from httpx import AsyncClient

from tests.conftest import get_auth_headers


@pytest.mark.asyncio
class TestLogin:
    async def test_login_success(self, client: AsyncClient, project_admin):
        res = await client.post("/api/v1/auth/login", json={
            "email": "lead@acmeplumbing.com",
            "password": "LeadPassword123!",
        })
        assert res.status_code == 200
        data = res.json()
        assert "access_token" in data
        assert data["user"]["email"] == "lead@acmeplumbing.com"
        assert data["user"]["companyId"] == project_admin.company_id

    async def test_login_wrong_password(self, client: AsyncClient, project_admin):
        res = await client.post("/api/v1/auth/login", json={
            "email": "lead@acmeplumbing.com",
            "password": "WrongPassword123!",
        })
        assert res.status_code == 401
        assert res.json()["message"] == "Invalid credentials"

    async def test_login_nonexistent_user(self, client: AsyncClient):
        res = await client.post("/api/v1/auth/login", json={
            "email": "nobody@acmeplumbing.com",
            "password": "SomePassword123!",
        })
        assert res.status_code == 401

    async def test_login_invalid_email(self, client: AsyncClient):
        res = await client.post("/api/v1/auth/login", json={
            "email": "not-an-email",
            "password": "SomePassword123!",
        })
        assert res.status_code == 400
        assert "email" in res.json()["errors"]


@pytest.mark.asyncio
class TestTokens:
    async def test_access_protected_route(self, client: AsyncClient, member_user):
        res = await client.get("/api/v1/auth/me", headers=get_auth_headers(member_user))
        assert res.status_code == 200
        assert res.json()["email"] == "tech@acmeplumbing.com"
        assert res.json()["id"] == member_user.id

    async def test_access_without_token(self, client: AsyncClient):
        res = await client.get("/api/v1/auth/me")
        assert res.status_code in (401, 403)

    async def test_access_with_invalid_token(self, client: AsyncClient):
        res = await client.get("/api/v1/auth/me", headers={
            "Authorization": "Bearer invalid.token.here"
        })
        assert res.status_code == 401

    async def test_inactive_user_rejected(self, client: AsyncClient, db_session, member_user):
        headers = get_auth_headers(member_user)
        member_user.is_active = False
        await db_session.commit()

        res = await client.get("/api/v1/auth/me", headers=headers)
        assert res.status_code == 401

    async def test_soft_deleted_user_rejected(self, client: AsyncClient, db_session, member_user):
        headers = get_auth_headers(member_user)
        member_user.soft_delete = True
        await db_session.commit()

        res = await client.get("/api/v1/auth/me", headers=headers)
        assert res.status_code == 401
