# app/domains/pur/crud.py

"""
'pur' 도메인 (구매, Purchase Manager)의 CRUD 및 비즈니스 로직 모듈입니다.

구매와 구매 품목은 확정 전까지 재고에 영향을 주지 않습니다.
구매 행을 변경하는 모든 작업은 먼저 구매 행을 SELECT ... FOR UPDATE 로 잠근 뒤
확정 여부를 검사하므로, "확정 여부 확인 후 변경"이 동시 확정과 경합하지 않습니다.
"""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func
from sqlalchemy.orm import selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.crud_base import CRUDBase
from app.core.database import transaction_scope
from app.core.exceptions import InvalidStateError, NotFoundError
from app.core.periods import StatsPeriod, parse_report_range, period_start
from app.domains.inv import models as inv_models
from app.domains.inv import services as inv_services
from app.domains.pur import models as pur_models
from app.domains.pur import schemas as pur_schemas

logger = logging.getLogger(__name__)

# 구매 헤더에서 NULL 로 되돌릴 수 있는 필드
NULLABLE_HEADER_FIELDS = {"supplier_phone", "payment_method"}


def lines_value(lines: List[Tuple[int, Decimal]]) -> Decimal:
    """(수량, 단가) 목록의 금액 합계"""
    return sum((Decimal(quantity) * unit_cost for quantity, unit_cost in lines), Decimal("0"))


def is_overpaid(amount_paid: Decimal, items_value: Decimal, ratio: float) -> bool:
    """지불 금액이 품목 금액 합계의 ratio 배를 넘는지 확인합니다 (품목 금액이 0이면 검사하지 않음)."""
    if items_value <= 0:
        return False
    return amount_paid > items_value * Decimal(str(ratio))


class PurchaseItemCRUD(
    CRUDBase[
        pur_models.PurchaseItem,
        pur_schemas.PurchaseLineIn,
        pur_schemas.PurchaseItemUpdate,
    ]
):
    """PurchaseItem 조회 작업을 처리합니다. 변경은 PurchaseCRUD가 구매 행을 잠근 뒤 수행합니다."""

    async def get_with_item(self, db: AsyncSession, id: int) -> pur_models.PurchaseItem:
        query = (
            select(self.model)
            .where(self.model.id == id)
            .options(selectinload(self.model.item))
            .execution_options(populate_existing=True)
        )
        line = (await db.execute(query)).scalar_one_or_none()
        if line is None:
            raise NotFoundError("PurchaseItem", id)
        return line

    async def get_by_purchase_and_item(
        self, db: AsyncSession, *, purchase_id: int, item_id: int
    ) -> Optional[pur_models.PurchaseItem]:
        query = (
            select(self.model)
            .where(self.model.purchase_id == purchase_id, self.model.item_id == item_id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(query)).scalar_one_or_none()

    async def list_for_purchase(self, db: AsyncSession, *, purchase_id: int) -> List[pur_models.PurchaseItem]:
        if await db.get(pur_models.Purchase, purchase_id) is None:
            raise NotFoundError("Purchase", purchase_id)
        query = (
            select(self.model)
            .where(self.model.purchase_id == purchase_id)
            .options(selectinload(self.model.item))
            .order_by(self.model.id)
        )
        return (await db.execute(query)).scalars().all()


class PurchaseCRUD(
    CRUDBase[
        pur_models.Purchase,
        pur_schemas.PurchaseCreate,
        pur_schemas.PurchaseUpdate,
    ]
):
    """Purchase 모델에 특화된 CRUD 및 확정(finalize) 로직을 처리합니다."""

    @staticmethod
    def _line_loader():
        return selectinload(pur_models.Purchase.items).selectinload(pur_models.PurchaseItem.item)

    async def get_with_items(self, db: AsyncSession, id: int) -> pur_models.Purchase:
        query = (
            select(self.model)
            .where(self.model.id == id)
            .options(self._line_loader())
            .execution_options(populate_existing=True)
        )
        purchase = (await db.execute(query)).scalar_one_or_none()
        if purchase is None:
            raise NotFoundError("Purchase", id)
        return purchase

    async def lock_purchase(self, db: AsyncSession, id: int) -> pur_models.Purchase:
        query = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        purchase = (await db.execute(query)).scalar_one_or_none()
        if purchase is None:
            raise NotFoundError("Purchase", id)
        return purchase

    @staticmethod
    def ensure_open(purchase: pur_models.Purchase) -> None:
        if purchase.finalized:
            logger.warning("확정된 구매 변경 시도: purchase=%s", purchase.id)
            raise InvalidStateError(
                f"Purchase {purchase.id} is finalized and can no longer be modified",
                purchase_id=purchase.id,
            )

    def _warn_if_overpaid(self, purchase_id: int, amount_paid: Decimal, items_value: Decimal) -> None:
        if is_overpaid(amount_paid, items_value, settings.PAID_AMOUNT_WARNING_RATIO):
            logger.warning(
                "구매 지불 금액이 품목 금액보다 큽니다: purchase=%s paid=%s items_value=%s",
                purchase_id, amount_paid, items_value,
            )

    # -------------------------------------------------------------------------
    # 생성 / 헤더 수정 / 삭제
    # -------------------------------------------------------------------------
    async def create(self, db: AsyncSession, *, obj_in: pur_schemas.PurchaseCreate) -> pur_models.Purchase:
        """
        구매와 구매 품목을 하나의 트랜잭션으로 저장합니다. 재고는 변경하지 않습니다.
        어느 한 품목이라도 해석에 실패하면 구매 전체가 저장되지 않습니다.
        같은 품목으로 해석된 줄은 수량을 합쳐 한 줄로 저장합니다 (단가는 마지막 값).
        """
        for line in obj_in.items:
            inv_services.require_positive_quantity(line.quantity)

        async with transaction_scope(db):
            merged: Dict[int, Tuple[int, Decimal]] = {}
            for line in obj_in.items:
                item = await inv_services.resolve_item_ref(db, line.to_ref())
                quantity, _ = merged.get(item.id, (0, None))
                merged[item.id] = (quantity + line.quantity, line.unit_cost)

            purchase = pur_models.Purchase(**obj_in.model_dump(exclude={"items"}))
            db.add(purchase)
            await db.flush()
            purchase_id = purchase.id

            for item_id, (quantity, unit_cost) in merged.items():
                db.add(pur_models.PurchaseItem(
                    purchase_id=purchase_id, item_id=item_id, quantity=quantity, unit_cost=unit_cost
                ))
            await db.flush()

        logger.info("구매 생성: purchase=%s supplier=%s lines=%s", purchase_id, obj_in.supplier, len(merged))
        self._warn_if_overpaid(purchase_id, obj_in.amount_paid, lines_value(list(merged.values())))
        return await self.get_with_items(db, purchase_id)

    async def update_header(
        self, db: AsyncSession, *, id: int, obj_in: pur_schemas.PurchaseUpdate
    ) -> pur_models.Purchase:
        async with transaction_scope(db):
            purchase = await self.lock_purchase(db, id)
            self.ensure_open(purchase)
            for key, value in obj_in.model_dump(exclude_unset=True).items():
                if value is None and key not in NULLABLE_HEADER_FIELDS:
                    continue
                setattr(purchase, key, value)
            db.add(purchase)
            await db.flush()
        return await self.get_with_items(db, id)

    async def remove(self, db: AsyncSession, *, id: int) -> None:
        """
        구매 품목을 먼저, 그다음 구매를 삭제합니다.
        확정된 구매를 삭제해도 이미 반영된 재고는 되돌리지 않습니다.
        """
        async with transaction_scope(db):
            purchase = await self.lock_purchase(db, id)
            was_finalized = purchase.finalized
            await db.execute(delete(pur_models.PurchaseItem).where(pur_models.PurchaseItem.purchase_id == id))
            await db.execute(delete(pur_models.Purchase).where(pur_models.Purchase.id == id))
        if was_finalized:
            logger.info("확정된 구매 삭제: purchase=%s (재고는 유지됨)", id)
        else:
            logger.info("구매 삭제: purchase=%s", id)

    # -------------------------------------------------------------------------
    # 구매 품목 추가 / 수정 / 제거
    # -------------------------------------------------------------------------
    async def add_item(
        self, db: AsyncSession, *, purchase_id: int, line_in: pur_schemas.PurchaseLineIn
    ) -> pur_models.PurchaseItem:
        """
        구매에 품목을 추가합니다. 같은 품목의 줄이 이미 있으면 수량을 더하고 단가를 새 값으로 바꿉니다.
        """
        inv_services.require_positive_quantity(line_in.quantity)
        async with transaction_scope(db):
            purchase = await self.lock_purchase(db, purchase_id)
            self.ensure_open(purchase)
            item = await inv_services.resolve_item_ref(db, line_in.to_ref())

            line = await purchase_item.get_by_purchase_and_item(db, purchase_id=purchase_id, item_id=item.id)
            if line is None:
                line = pur_models.PurchaseItem(
                    purchase_id=purchase_id, item_id=item.id,
                    quantity=line_in.quantity, unit_cost=line_in.unit_cost,
                )
            else:
                line.quantity += line_in.quantity
                line.unit_cost = line_in.unit_cost
            db.add(line)
            await db.flush()
            line_id = line.id
        logger.info("구매 품목 추가: purchase=%s item=%s +%s", purchase_id, item.id, line_in.quantity)
        return await purchase_item.get_with_item(db, line_id)

    async def _lock_line(self, db: AsyncSession, line_id: int) -> pur_models.PurchaseItem:
        line = await db.get(pur_models.PurchaseItem, line_id)
        if line is None:
            raise NotFoundError("PurchaseItem", line_id)
        purchase = await self.lock_purchase(db, line.purchase_id)
        self.ensure_open(purchase)
        # 구매 행을 잠근 뒤 줄을 다시 읽어 그 사이의 변경/삭제를 반영합니다.
        refreshed = await purchase_item.get_by_purchase_and_item(
            db, purchase_id=line.purchase_id, item_id=line.item_id
        )
        if refreshed is None or refreshed.id != line_id:
            raise NotFoundError("PurchaseItem", line_id)
        return refreshed

    async def update_item(
        self, db: AsyncSession, *, line_id: int, obj_in: pur_schemas.PurchaseItemUpdate
    ) -> pur_models.PurchaseItem:
        update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
        if "quantity" in update_data:
            inv_services.require_positive_quantity(update_data["quantity"])
        async with transaction_scope(db):
            line = await self._lock_line(db, line_id)
            for key, value in update_data.items():
                setattr(line, key, value)
            db.add(line)
            await db.flush()
        return await purchase_item.get_with_item(db, line_id)

    async def remove_item(self, db: AsyncSession, *, line_id: int) -> None:
        async with transaction_scope(db):
            line = await self._lock_line(db, line_id)
            await db.execute(delete(pur_models.PurchaseItem).where(pur_models.PurchaseItem.id == line.id))
        logger.info("구매 품목 제거: line=%s", line_id)

    # -------------------------------------------------------------------------
    # 확정 (finalize)
    # -------------------------------------------------------------------------
    async def finalize(self, db: AsyncSession, *, id: int, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        구매를 확정하고 모든 구매 품목 수량을 재고에 더합니다.

        - 확정 플래그 검사와 변경은 잠긴 구매 행 위에서 같은 트랜잭션으로 이루어지므로
          동시에 두 번 호출되어도 재고는 한 번만 반영됩니다.
        - 품목은 item_id 오름차순으로 잠가, 품목을 공유하는 동시 확정 사이의 교착을 피합니다.
        - 어느 한 품목이라도 실패하면 전체가 롤백됩니다.
        - 품목이 없는 구매는 재고 변경 없이 확정만 됩니다.
        """
        async with transaction_scope(db):
            purchase = await self.lock_purchase(db, id)
            if purchase.finalized:
                logger.warning("이미 확정된 구매: purchase=%s", id)
                raise InvalidStateError(f"Purchase {id} is already finalized", purchase_id=id)

            lines_query = (
                select(pur_models.PurchaseItem)
                .where(pur_models.PurchaseItem.purchase_id == id)
                .order_by(pur_models.PurchaseItem.item_id)
                .execution_options(populate_existing=True)
            )
            lines = (await db.execute(lines_query)).scalars().all()

            items_updated = []
            for line in lines:
                new_quantity = await inv_services.adjust_quantity(db, line.item_id, line.quantity)
                item = await db.get(inv_models.Item, line.item_id)
                items_updated.append({
                    "item_id": line.item_id,
                    "name": item.name,
                    "added": line.quantity,
                    "new_quantity": new_quantity,
                })

            purchase.finalized = True
            purchase.finalized_at = datetime.now(UTC)
            if notes is not None:
                purchase.notes = notes
            db.add(purchase)
            await db.flush()
            result = {
                "purchase_id": id,
                "finalized_at": purchase.finalized_at,
                "amount_paid": purchase.amount_paid,
                "items_updated": items_updated,
            }
        logger.info("구매 확정: purchase=%s lines=%s", id, len(items_updated))
        return result

    # -------------------------------------------------------------------------
    # 목록 / 통계 / 보고서
    # -------------------------------------------------------------------------
    async def list_page(
        self,
        db: AsyncSession,
        *,
        page: int,
        limit: int,
        supplier: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        amount_min: Optional[Decimal] = None,
        amount_max: Optional[Decimal] = None,
        finalized: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """구매 목록 (구매일 내림차순)"""
        conditions = []
        if supplier:
            conditions.append(self.model.supplier.icontains(supplier, autoescape=True))
        if amount_min is not None:
            conditions.append(self.model.amount_paid >= amount_min)
        if amount_max is not None:
            conditions.append(self.model.amount_paid <= amount_max)
        return await self.get_page(
            db,
            page=page,
            limit=limit,
            filters={"finalized": finalized},
            date_range_field="purchase_date",
            start_date=date_from,
            end_date=date_to,
            conditions=conditions,
            order_by_field="purchase_date",
            options=[self._line_loader()],
        )

    async def statistics(
        self,
        db: AsyncSession,
        *,
        period: Optional[StatsPeriod] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        구매 건수, 총 지불액, 평균 지불액, 총 구매 수량을 집계합니다.
        period가 주어지면 기간 시작일부터, 아니면 date_from/date_to 범위(모두 선택)로 집계합니다.
        """
        if period is not None:
            date_from = period_start(period, now or datetime.now(UTC)).date()
            date_to = None

        conditions = []
        if date_from is not None:
            conditions.append(self.model.purchase_date >= date_from)
        if date_to is not None:
            conditions.append(self.model.purchase_date <= date_to)

        totals_query = select(
            func.count(self.model.id), func.coalesce(func.sum(self.model.amount_paid), 0)
        ).where(*conditions)
        count, total_paid = (await db.execute(totals_query)).one()

        quantity_query = (
            select(func.coalesce(func.sum(pur_models.PurchaseItem.quantity), 0))
            .join(self.model, self.model.id == pur_models.PurchaseItem.purchase_id)
            .where(*conditions)
        )
        total_quantity = (await db.execute(quantity_query)).scalar_one()

        total_paid = Decimal(total_paid)
        average_paid = (total_paid / count).quantize(Decimal("0.01")) if count else Decimal("0")
        return {
            "period": period.value if period else None,
            "date_from": date_from,
            "date_to": date_to,
            "total_purchases": count,
            "total_paid": total_paid,
            "average_paid": average_paid,
            "total_quantity": int(total_quantity),
        }

    async def report(self, db: AsyncSession, *, date_from: Optional[str], date_to: Optional[str]) -> Dict[str, Any]:
        """필수 기간(dateFrom/dateTo)의 구매 요약과 목록을 반환합니다."""
        start, end = parse_report_range(date_from, date_to)
        summary = await self.statistics(db, date_from=start.date(), date_to=end.date())
        query = (
            select(self.model)
            .where(self.model.purchase_date >= start.date(), self.model.purchase_date <= end.date())
            .options(self._line_loader())
            .order_by(self.model.purchase_date.desc(), self.model.id.desc())
        )
        purchases = (await db.execute(query)).scalars().all()
        return {"period": {"start": start, "end": end}, "summary": summary, "purchases": purchases}


purchase = PurchaseCRUD(pur_models.Purchase)
purchase_item = PurchaseItemCRUD(pur_models.PurchaseItem)
