# tests/domains/test_usr_n.py

"""
'usr' 도메인 (사용자 및 인증) 관련 CRUD 로직과 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import ConflictError
from app.domains.usr import crud as usr_crud
from app.domains.usr import models as usr_models
from app.domains.usr import schemas as usr_schemas


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@pytest.mark.asyncio
async def test_login_for_access_token_success(client: AsyncClient, test_user: usr_models.User):
    response = await client.post(
        "/api/v1/usr/auth/token", data={"username": test_user.username, "password": "testpass123"}
    )
    assert response.status_code == 200
    body = response.json()
    assert "access_token" in body
    assert body["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_with_wrong_password(client: AsyncClient, test_user: usr_models.User):
    response = await client.post(
        "/api/v1/usr/auth/token", data={"username": test_user.username, "password": "wrongpass"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client: AsyncClient, user_factory):
    user = await user_factory("inactive", "inactivepass1", role=usr_models.UserRole.GENERAL_USER, is_active=False)
    response = await client.post("/api/v1/usr/auth/token", data={"username": user.username, "password": "inactivepass1"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_read_me_with_token(client: AsyncClient, test_user: usr_models.User):
    username = test_user.username
    response = await client.post("/api/v1/usr/auth/token", data={"username": username, "password": "testpass123"})
    token = response.json()["access_token"]

    response = await client.get("/api/v1/usr/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["username"] == username
    assert "password_hash" not in response.json()


@pytest.mark.asyncio
async def test_protected_endpoints_require_token(client: AsyncClient):
    assert (await client.get("/api/v1/usr/auth/me")).status_code == 401
    assert (await client.get("/api/v1/inv/items")).status_code == 401
    assert (await client.get("/api/v1/wdn/write-downs")).status_code == 401
    assert (await client.get("/api/v1/pur/purchases")).status_code == 401


@pytest.mark.asyncio
async def test_invalid_token_rejected(client: AsyncClient):
    response = await client.get("/api/v1/usr/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


# =============================================================================
# 2. 사용자 CRUD
# =============================================================================
@pytest.mark.asyncio
async def test_create_user_hashes_password(db_session: AsyncSession):
    user = await usr_crud.user.create(
        db_session,
        obj_in=usr_schemas.UserCreate(username="estoquista", password="estoque123", role=usr_models.UserRole.STOCK_MANAGER),
    )
    assert user.password_hash != "estoque123"
    assert await usr_crud.user.authenticate(db_session, username="estoquista", password="estoque123") is not None
    assert await usr_crud.user.authenticate(db_session, username="estoquista", password="errado123") is None


@pytest.mark.asyncio
async def test_create_duplicate_username_conflicts(db_session: AsyncSession, test_user: usr_models.User):
    with pytest.raises(ConflictError):
        await usr_crud.user.create(
            db_session, obj_in=usr_schemas.UserCreate(username=test_user.username, password="anotherpass1")
        )
