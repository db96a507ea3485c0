# app/domains/wdn/crud.py

"""
'wdn' 도메인 (재고 차감 기록, Write-Down Manager)의 CRUD 및 비즈니스 로직 모듈입니다.

- 생성: 하나의 트랜잭션 안에서 품목을 잠그고 재고를 차감한 뒤 기록을 저장합니다.
- 삭제: 보상 트랜잭션으로 차감 수량을 재고에 되돌리고 기록을 삭제합니다.
- 수정: 사유/메모만 바꾸며 재고에는 영향이 없습니다.
"""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.database import transaction_scope
from app.core.exceptions import NotFoundError
from app.core.periods import StatsPeriod, parse_report_range, period_start
from app.domains.inv import models as inv_models
from app.domains.inv import services as inv_services
from app.domains.wdn import models as wdn_models
from app.domains.wdn import schemas as wdn_schemas

logger = logging.getLogger(__name__)


class WriteDownCRUD(
    CRUDBase[
        wdn_models.WriteDown,
        wdn_schemas.WriteDownCreate,
        wdn_schemas.WriteDownUpdate,
    ]
):
    """WriteDown 모델에 특화된 CRUD 작업을 처리합니다."""

    nullable_fields = frozenset({"note"})

    async def get_with_item(self, db: AsyncSession, id: int) -> wdn_models.WriteDown:
        """품목 스냅샷을 함께 로드합니다. 세션에 남은 값은 최신 값으로 덮어씁니다."""
        query = (
            select(self.model)
            .where(self.model.id == id)
            .options(selectinload(self.model.item))
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        write_down = result.scalar_one_or_none()
        if write_down is None:
            raise NotFoundError("WriteDown", id)
        return write_down

    async def create(self, db: AsyncSession, *, obj_in: wdn_schemas.WriteDownCreate) -> wdn_models.WriteDown:
        """
        재고 차감 기록을 생성합니다. 품목 재고가 정확히 quantity 만큼 줄어듭니다.
        재고가 부족하면 InsufficientStockError가 발생하고 아무것도 저장되지 않습니다.
        """
        inv_services.require_positive_quantity(obj_in.quantity)
        async with transaction_scope(db):
            # adjust_quantity가 품목 행을 잠근 상태에서 재고를 검사/차감합니다.
            await inv_services.adjust_quantity(db, obj_in.item_id, -obj_in.quantity)
            write_down = wdn_models.WriteDown.model_validate(obj_in)
            db.add(write_down)
            await db.flush()
            write_down_id = write_down.id
        logger.info(
            "재고 차감 기록 생성: id=%s item=%s quantity=%s reason=%s",
            write_down_id, obj_in.item_id, obj_in.quantity, obj_in.reason.value,
        )
        return await self.get_with_item(db, write_down_id)

    async def update(
        self, db: AsyncSession, *, db_obj: wdn_models.WriteDown, obj_in: wdn_schemas.WriteDownUpdate
    ) -> wdn_models.WriteDown:
        """사유/메모만 수정합니다. 사유에 null이 오면 무시하고, 메모는 null로 지울 수 있습니다."""
        for key, value in self.updatable_data(obj_in).items():
            setattr(db_obj, key, value)
        db.add(db_obj)
        await db.commit()
        return await self.get_with_item(db, db_obj.id)

    async def remove(self, db: AsyncSession, *, id: int) -> Dict[str, int]:
        """
        재고 차감 기록을 삭제하고 차감했던 수량을 품목 재고에 되돌립니다.
        기록 행을 먼저 잠가 동시에 두 번 삭제되어도 재고가 한 번만 복원되도록 합니다.
        """
        async with transaction_scope(db):
            query = (
                select(self.model)
                .where(self.model.id == id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            write_down = (await db.execute(query)).scalar_one_or_none()
            if write_down is None:
                raise NotFoundError("WriteDown", id)
            item_id, quantity = write_down.item_id, write_down.quantity
            # 가산 방향이므로 재고 충분 여부를 다시 검사하지 않습니다.
            current = await inv_services.adjust_quantity(db, item_id, quantity)
            await db.delete(write_down)
            await db.flush()
        logger.info("재고 차감 기록 삭제: id=%s item=%s restored=%s", id, item_id, quantity)
        return {"id": id, "item_id": item_id, "restored_quantity": quantity, "current_quantity": current}

    async def list_page(
        self,
        db: AsyncSession,
        *,
        page: int,
        limit: int,
        reason: Optional[wdn_models.WriteDownReason] = None,
        item_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        """차감 기록 목록 (created_at 내림차순)"""
        return await self.get_page(
            db,
            page=page,
            limit=limit,
            filters={"reason": reason, "item_id": item_id},
            date_range_field="created_at",
            start_date=date_from,
            end_date=date_to,
            order_by_field="created_at",
            options=[selectinload(self.model.item)],
        )

    async def statistics(
        self, db: AsyncSession, *, period: StatsPeriod, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        기간 내 차감 건수/수량과 사유별 {count, quantity, value} 집계를 반환합니다.
        value는 차감 수량 x 품목 단가의 합이며, 기록이 없으면 0으로 채워진 결과를 반환합니다.
        """
        since = period_start(period, now or datetime.now(UTC))
        query = (
            select(
                self.model.reason,
                func.count(self.model.id),
                func.coalesce(func.sum(self.model.quantity), 0),
                func.coalesce(func.sum(self.model.quantity * inv_models.Item.unit_price), 0),
            )
            .join(inv_models.Item, inv_models.Item.id == self.model.item_id)
            .where(self.model.created_at >= since)
            .group_by(self.model.reason)
        )
        rows = (await db.execute(query)).all()

        by_reason = {reason.value: {"count": 0, "quantity": 0, "value": Decimal("0")} for reason in wdn_models.WriteDownReason}
        for reason, count, quantity, value in rows:
            by_reason[reason.value] = {"count": count, "quantity": int(quantity), "value": Decimal(value)}

        return {
            "period": period.value,
            "since": since,
            "total_count": sum(entry["count"] for entry in by_reason.values()),
            "total_quantity": sum(entry["quantity"] for entry in by_reason.values()),
            "by_reason": by_reason,
        }

    async def report(
        self,
        db: AsyncSession,
        *,
        date_from: Optional[str],
        date_to: Optional[str],
        reason: Optional[wdn_models.WriteDownReason] = None,
    ) -> Dict[str, Any]:
        """필수 기간(dateFrom/dateTo)과 선택 사유로 차감 기록 보고서를 만듭니다."""
        start, end = parse_report_range(date_from, date_to)
        query = (
            select(self.model)
            .where(self.model.created_at >= start, self.model.created_at <= end)
            .options(selectinload(self.model.item))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        if reason is not None:
            query = query.where(self.model.reason == reason)
        write_downs: List[wdn_models.WriteDown] = (await db.execute(query)).scalars().all()

        total_value = sum(
            (Decimal(wd.quantity) * wd.item.unit_price for wd in write_downs if wd.item is not None),
            Decimal("0"),
        )
        return {
            "period": {"start": start, "end": end},
            "filters": {"reason": reason.value if reason else "All"},
            "summary": {
                "total_write_downs": len(write_downs),
                "total_quantity": sum(wd.quantity for wd in write_downs),
                "total_value": total_value,
            },
            "write_downs": write_downs,
        }


write_down = WriteDownCRUD(wdn_models.WriteDown)
