# tests/domains/test_inv_n.py

"""
'inv' 도메인 (품목 및 재고 관리) 관련 서비스와 API 엔드포인트에 대한 통합 테스트 모듈입니다.

- 품목 저장소: 수량 조회, 행 잠금 하의 수량 조정, 재고 부족 시 불변
- 직접 재고 조정 API: add-quantity / remove-quantity
- 이름 기반 품목 참조 해석 (완전 일치 우선, 부분 일치, 모호성)
- 동시 차감 시 초과 판매가 일어나지 않는지 (실제 커밋하는 독립 세션 사용)
"""

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import delete
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from app.core.database import transaction_scope
from app.domains.inv import models as inv_models
from app.domains.inv import services as inv_services
from app.domains.inv import tasks as inv_tasks
from app.domains.inv.services import ById, ByName
from app.domains.wdn import models as wdn_models


# =================================================================================
# 1. 품목 저장소 (서비스 계층)
# =================================================================================
@pytest.mark.asyncio
async def test_get_quantity_returns_current_stock(db_session: AsyncSession, test_item: inv_models.Item):
    assert await inv_services.get_quantity(db_session, test_item.id) == 10


@pytest.mark.asyncio
async def test_get_quantity_unknown_item(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await inv_services.get_quantity(db_session, 987654)


@pytest.mark.asyncio
async def test_adjust_quantity_applies_delta(db_session: AsyncSession, test_item: inv_models.Item):
    item_id = test_item.id
    async with transaction_scope(db_session):
        assert await inv_services.adjust_quantity(db_session, item_id, 5) == 15
        assert await inv_services.adjust_quantity(db_session, item_id, -15) == 0
    assert await inv_services.get_quantity(db_session, item_id) == 0


@pytest.mark.asyncio
async def test_adjust_quantity_insufficient_leaves_stock_unchanged(db_session: AsyncSession, test_item: inv_models.Item):
    item_id = test_item.id
    with pytest.raises(InsufficientStockError) as exc_info:
        async with transaction_scope(db_session):
            await inv_services.adjust_quantity(db_session, item_id, -50)

    assert exc_info.value.available == 10
    assert exc_info.value.requested == 50
    assert await inv_services.get_quantity(db_session, item_id) == 10


@pytest.mark.asyncio
async def test_adjust_quantity_unknown_item(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        async with transaction_scope(db_session):
            await inv_services.adjust_quantity(db_session, 987654, 1)


# =================================================================================
# 2. 직접 재고 조정 (서비스 계층)
# =================================================================================
@pytest.mark.asyncio
async def test_add_and_remove_quantity_report_previous_and_current(db_session: AsyncSession, test_item: inv_models.Item):
    item_id = test_item.id

    added = await inv_services.add_quantity(db_session, item_id, 5)
    assert added == {"item_id": item_id, "previous": 10, "added": 5, "current": 15}

    removed = await inv_services.remove_quantity(db_session, item_id, 3)
    assert removed == {"item_id": item_id, "previous": 15, "removed": 3, "current": 12}


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -5])
async def test_direct_adjustment_rejects_non_positive_quantity(
    db_session: AsyncSession, test_item: inv_models.Item, quantity: int
):
    item_id = test_item.id
    with pytest.raises(InvalidArgumentError):
        await inv_services.add_quantity(db_session, item_id, quantity)
    with pytest.raises(InvalidArgumentError):
        await inv_services.remove_quantity(db_session, item_id, quantity)
    assert await inv_services.get_quantity(db_session, item_id) == 10


# =================================================================================
# 3. 품목 참조 해석 (ById / ByName)
# =================================================================================
@pytest.mark.asyncio
async def test_resolve_by_id(db_session: AsyncSession, test_item: inv_models.Item):
    item = await inv_services.resolve_item_ref(db_session, ById(test_item.id))
    assert item.id == test_item.id

    with pytest.raises(NotFoundError):
        await inv_services.resolve_item_ref(db_session, ById(987654))


@pytest.mark.asyncio
async def test_resolve_by_name_prefers_exact_match(db_session: AsyncSession, item_factory):
    shirt = await item_factory("Shirt")
    await item_factory("Shirt Long Sleeve")

    # 대소문자 무시 완전 일치가 부분 일치보다 우선합니다.
    item = await inv_services.resolve_item_ref(db_session, ByName("shirt"))
    assert item.id == shirt.id


@pytest.mark.asyncio
async def test_resolve_by_name_falls_back_to_partial_match(db_session: AsyncSession, item_factory):
    jeans = await item_factory("Calça Jeans Slim", type="Pants")
    item = await inv_services.resolve_item_ref(db_session, ByName("jeans"))
    assert item.id == jeans.id


@pytest.mark.asyncio
async def test_resolve_by_name_ambiguous_or_missing(db_session: AsyncSession, item_factory):
    await item_factory("Meia Branca", type="Socks")
    await item_factory("Meia Preta", type="Socks")

    with pytest.raises(ConflictError) as exc_info:
        await inv_services.resolve_item_ref(db_session, ByName("meia"))
    assert len(exc_info.value.extra["candidates"]) == 2

    with pytest.raises(NotFoundError):
        await inv_services.resolve_item_ref(db_session, ByName("Chapéu"))

    with pytest.raises(InvalidArgumentError):
        await inv_services.resolve_item_ref(db_session, ByName("   "))


# =================================================================================
# 4. 동시성: 동시에 들어온 차감이 재고를 음수로 만들지 않음
# =================================================================================
async def _create_committed_item(session_factory, name: str, quantity: int) -> int:
    async with session_factory() as session:
        item = inv_models.Item(name=name, type="Shirt", quantity=quantity, unit_price=Decimal("1.00"))
        session.add(item)
        await session.commit()
        return item.id


async def _delete_committed_item(session_factory, item_id: int) -> None:
    async with session_factory() as session:
        await session.execute(delete(inv_models.Item).where(inv_models.Item.id == item_id))
        await session.commit()


@pytest.mark.asyncio
async def test_concurrent_removals_only_one_succeeds(committing_session_factory):
    item_id = await _create_committed_item(committing_session_factory, "Concurrent Shirt", 10)

    async def remove(quantity: int):
        async with committing_session_factory() as session:
            try:
                return await inv_services.remove_quantity(session, item_id, quantity)
            except InsufficientStockError as e:
                return e

    try:
        results = await asyncio.gather(remove(6), remove(6))
        successes = [r for r in results if isinstance(r, dict)]
        failures = [r for r in results if isinstance(r, InsufficientStockError)]

        assert len(successes) == 1
        assert len(failures) == 1
        assert failures[0].available == 4
        assert failures[0].requested == 6

        async with committing_session_factory() as session:
            assert await inv_services.get_quantity(session, item_id) == 4
    finally:
        await _delete_committed_item(committing_session_factory, item_id)


@pytest.mark.asyncio
async def test_many_concurrent_removals_never_oversell(committing_session_factory):
    item_id = await _create_committed_item(committing_session_factory, "Concurrent Socks", 10)

    async def remove_one():
        async with committing_session_factory() as session:
            try:
                await inv_services.remove_quantity(session, item_id, 1)
                return True
            except InsufficientStockError:
                return False

    try:
        results = await asyncio.gather(*(remove_one() for _ in range(15)))
        assert results.count(True) == 10
        assert results.count(False) == 5

        async with committing_session_factory() as session:
            assert await inv_services.get_quantity(session, item_id) == 0
    finally:
        await _delete_committed_item(committing_session_factory, item_id)


# =================================================================================
# 5. API 엔드포인트
# =================================================================================
@pytest.mark.asyncio
async def test_create_item_records_owner(authorized_client: AsyncClient, test_user):
    owner_id = test_user.id
    payload = {"name": "Vestido Floral", "type": "Dress", "size": "P", "color": "Red", "unit_price": "89.90", "quantity": 3}
    response = await authorized_client.post("/api/v1/inv/items", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Vestido Floral"
    assert body["quantity"] == 3
    assert body["owner_id"] == owner_id


@pytest.mark.asyncio
async def test_create_item_rejects_negative_initial_quantity(authorized_client: AsyncClient):
    payload = {"name": "Broken", "type": "Dress", "quantity": -1}
    response = await authorized_client.post("/api/v1/inv/items", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_items_paginated_and_filtered(authorized_client: AsyncClient, item_factory):
    for index in range(3):
        await item_factory(f"Blusa {index}", type="Blouse", color="Green")
    await item_factory("Bermuda", type="Shorts", color="Black")

    response = await authorized_client.get("/api/v1/inv/items", params={"type": "blouse", "limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 2
    assert body["pagination"] == {
        "page": 1, "limit": 2, "total": 3, "total_pages": 2, "has_next": True, "has_prev": False,
    }


@pytest.mark.asyncio
async def test_search_items_by_name(authorized_client: AsyncClient, item_factory):
    await item_factory("Jaqueta Jeans", type="Jacket")
    await item_factory("Jaqueta Couro", type="Jacket")
    await item_factory("Saia", type="Skirt")

    response = await authorized_client.get("/api/v1/inv/items/search", params={"q": "jaqueta"})
    assert response.status_code == 200
    assert [item["name"] for item in response.json()] == ["Jaqueta Couro", "Jaqueta Jeans"]


@pytest.mark.asyncio
async def test_update_item_does_not_touch_quantity(authorized_client: AsyncClient, test_item: inv_models.Item):
    item_id = test_item.id
    response = await authorized_client.put(
        f"/api/v1/inv/items/{item_id}", json={"color": "Navy", "quantity": 999}
    )
    assert response.status_code == 200
    assert response.json()["color"] == "Navy"
    assert response.json()["quantity"] == 10


@pytest.mark.asyncio
async def test_update_item_ignores_null_for_required_fields(authorized_client: AsyncClient, test_item: inv_models.Item):
    item_id = test_item.id
    response = await authorized_client.put(
        f"/api/v1/inv/items/{item_id}",
        json={"name": None, "type": None, "unit_price": None, "size": None},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Camiseta Azul"
    assert body["type"] == "Shirt"
    assert Decimal(str(body["unit_price"])) == Decimal("25.00")
    # size/color는 null로 지울 수 있습니다.
    assert body["size"] is None
    assert body["color"] == "Blue"


@pytest.mark.asyncio
async def test_read_item_quantity(authorized_client: AsyncClient, test_item: inv_models.Item):
    item_id = test_item.id
    response = await authorized_client.get(f"/api/v1/inv/items/{item_id}/quantity")
    assert response.status_code == 200
    assert response.json() == {"item_id": item_id, "quantity": 10}


@pytest.mark.asyncio
async def test_read_nonexistent_item(authorized_client: AsyncClient):
    response = await authorized_client.get("/api/v1/inv/items/987654")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_add_quantity_endpoint(authorized_client: AsyncClient, test_item: inv_models.Item):
    item_id = test_item.id
    response = await authorized_client.post(f"/api/v1/inv/items/{item_id}/add-quantity", json={"quantity": 7})
    assert response.status_code == 200
    assert response.json() == {"item_id": item_id, "previous": 10, "added": 7, "current": 17}


@pytest.mark.asyncio
async def test_remove_quantity_insufficient_returns_409_and_keeps_stock(
    authorized_client: AsyncClient, test_item: inv_models.Item
):
    item_id = test_item.id
    response = await authorized_client.post(f"/api/v1/inv/items/{item_id}/remove-quantity", json={"quantity": 50})
    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "INSUFFICIENT_STOCK"
    assert body["item_id"] == item_id
    assert body["available"] == 10
    assert body["requested"] == 50

    response = await authorized_client.get(f"/api/v1/inv/items/{item_id}/quantity")
    assert response.json()["quantity"] == 10


@pytest.mark.asyncio
async def test_add_quantity_zero_returns_400(authorized_client: AsyncClient, test_item: inv_models.Item):
    item_id = test_item.id
    response = await authorized_client.post(f"/api/v1/inv/items/{item_id}/add-quantity", json={"quantity": 0})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ARGUMENT"


@pytest.mark.asyncio
async def test_remove_quantity_unknown_item_returns_404(authorized_client: AsyncClient):
    response = await authorized_client.post("/api/v1/inv/items/987654/remove-quantity", json={"quantity": 1})
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_item_requires_admin(authorized_client: AsyncClient, test_item: inv_models.Item):
    response = await authorized_client.delete(f"/api/v1/inv/items/{test_item.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_item_as_admin(admin_client: AsyncClient, db_session: AsyncSession, test_item: inv_models.Item):
    item_id = test_item.id
    response = await admin_client.delete(f"/api/v1/inv/items/{item_id}")
    assert response.status_code == 204
    assert await db_session.get(inv_models.Item, item_id) is None


@pytest.mark.asyncio
async def test_delete_referenced_item_conflicts(
    admin_client: AsyncClient, db_session: AsyncSession, test_item: inv_models.Item
):
    item_id = test_item.id
    db_session.add(wdn_models.WriteDown(item_id=item_id, quantity=1, reason=wdn_models.WriteDownReason.LOSS))
    await db_session.commit()

    response = await admin_client.delete(f"/api/v1/inv/items/{item_id}")
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


# =================================================================================
# 6. 워커 태스크
# =================================================================================
@pytest.mark.asyncio
async def test_audit_stock_ledger_task_reports_ok(
    monkeypatch, db_session: AsyncSession, test_item: inv_models.Item
):
    @asynccontextmanager
    async def session_context():
        yield db_session

    monkeypatch.setattr(inv_tasks, "get_async_session_context", session_context)

    result = await inv_tasks.audit_stock_ledger_task({})
    assert result["status"] == "ok"
    assert result["checked"] >= 1
    assert result["negative_item_ids"] == []
