# app/domains/inv/services.py

"""
재고 원장(stock ledger)의 품목 저장소(Item Store) 서비스 모듈입니다.

`adjust_quantity()`가 재고 수량을 바꾸는 유일한 함수이며, 입고 확정, 재고 차감 기록 생성/삭제,
직접 재고 조정이 모두 이 함수를 거칩니다. 호출자는 반드시 `transaction_scope()` 안에서 호출해야
행 잠금이 커밋/롤백 시점까지 유지됩니다.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Union

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy import func

from app.core.database import transaction_scope
from app.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
)
from app.domains.inv import models as inv_models

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 품목 참조 (ItemRef = ById | ByName)
# =============================================================================
@dataclass(frozen=True)
class ById:
    item_id: int


@dataclass(frozen=True)
class ByName:
    name: str


ItemRef = Union[ById, ByName]


def pick_single_match(name: str, exact: Sequence[inv_models.Item], fuzzy: Sequence[inv_models.Item]) -> inv_models.Item:
    """
    이름 검색 결과에서 품목 하나를 고릅니다.

    대소문자 무시 완전 일치가 있으면 그것만 보고, 없으면 부분 일치 결과를 봅니다.
    후보가 없으면 NotFoundError, 둘 이상이면 ConflictError 입니다.
    """
    candidates = exact or fuzzy
    if not candidates:
        raise NotFoundError("Item", name)
    if len(candidates) > 1:
        raise ConflictError(
            f"Item name '{name}' is ambiguous",
            candidates=[item.id for item in candidates],
        )
    return candidates[0]


async def resolve_item_ref(db: AsyncSession, ref: ItemRef) -> inv_models.Item:
    """ItemRef를 실제 품목으로 변환합니다. 재고는 변경하지 않습니다."""
    if isinstance(ref, ById):
        item = await db.get(inv_models.Item, ref.item_id)
        if item is None:
            raise NotFoundError("Item", ref.item_id)
        return item

    name = ref.name.strip()
    if not name:
        raise InvalidArgumentError("Item name must not be empty")
    exact_query = (
        select(inv_models.Item)
        .where(func.lower(inv_models.Item.name) == name.lower())
        .order_by(inv_models.Item.id)
    )
    exact = (await db.execute(exact_query)).scalars().all()
    fuzzy: List[inv_models.Item] = []
    if not exact:
        fuzzy_query = (
            select(inv_models.Item)
            .where(inv_models.Item.name.icontains(name, autoescape=True))
            .order_by(inv_models.Item.id)
        )
        fuzzy = (await db.execute(fuzzy_query)).scalars().all()
    return pick_single_match(name, exact, fuzzy)


# =============================================================================
# 2. 품목 저장소 (Item Store)
# =============================================================================
def require_positive_quantity(quantity: int, field: str = "quantity") -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidArgumentError(f"'{field}' must be a positive integer", field=field)
    return quantity


async def lock_item(db: AsyncSession, item_id: int) -> inv_models.Item:
    """
    품목 행을 SELECT ... FOR UPDATE 로 잠그고 최신 값으로 다시 읽어옵니다.
    세션의 identity map에 남아 있던 오래된 수량은 populate_existing 으로 덮어씁니다.
    """
    statement = (
        select(inv_models.Item)
        .where(inv_models.Item.id == item_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await db.execute(statement)
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError("Item", item_id)
    return item


async def get_quantity(db: AsyncSession, item_id: int) -> int:
    result = await db.execute(select(inv_models.Item.quantity).where(inv_models.Item.id == item_id))
    quantity = result.scalar_one_or_none()
    if quantity is None:
        raise NotFoundError("Item", item_id)
    return quantity


async def adjust_quantity(db: AsyncSession, item_id: int, delta: int) -> int:
    """
    품목 재고에 delta를 더하고 새 수량을 반환합니다.

    Args:
        db (AsyncSession): 호출자의 트랜잭션에 참여 중인 세션.
        item_id (int): 대상 품목 ID.
        delta (int): 가감할 수량 (음수면 차감).

    Returns:
        int: 변경 후 재고 수량.

    Raises:
        NotFoundError: 품목이 존재하지 않을 때.
        InsufficientStockError: 결과 수량이 0 미만이 될 때.
    """
    item = await lock_item(db, item_id)
    new_quantity = item.quantity + delta
    if new_quantity < 0:
        logger.warning(
            "재고 부족: item=%s 현재=%s 요청=%s", item_id, item.quantity, -delta
        )
        raise InsufficientStockError(item_id, available=item.quantity, requested=-delta)

    item.quantity = new_quantity
    db.add(item)
    await db.flush()
    logger.info("재고 변경: item=%s delta=%+d -> %s", item_id, delta, new_quantity)
    return new_quantity


# =============================================================================
# 3. 직접 재고 조정 (Direct Adjustment API)
# =============================================================================
async def add_quantity(db: AsyncSession, item_id: int, quantity: int) -> Dict[str, int]:
    """수동 입고: {item_id, previous, added, current}를 반환합니다."""
    require_positive_quantity(quantity)
    async with transaction_scope(db):
        current = await adjust_quantity(db, item_id, quantity)
    return {"item_id": item_id, "previous": current - quantity, "added": quantity, "current": current}


async def remove_quantity(db: AsyncSession, item_id: int, quantity: int) -> Dict[str, int]:
    """수동 출고: {item_id, previous, removed, current}를 반환합니다."""
    require_positive_quantity(quantity)
    async with transaction_scope(db):
        current = await adjust_quantity(db, item_id, -quantity)
    return {"item_id": item_id, "previous": current + quantity, "removed": quantity, "current": current}
