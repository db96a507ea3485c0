# app/domains/inv/crud.py

"""
'inv' 도메인의 품목 입고(intake) CRUD 작업을 처리하는 모듈입니다.

재고 수량의 변경은 여기서 하지 않습니다 (app.domains.inv.services 참고).
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import ConflictError, NotFoundError
from app.domains.inv import models as inv_models
from app.domains.inv import schemas as inv_schemas
from app.domains.pur import models as pur_models
from app.domains.wdn import models as wdn_models

logger = logging.getLogger(__name__)


class ItemCRUD(
    CRUDBase[
        inv_models.Item,
        inv_schemas.ItemCreate,
        inv_schemas.ItemUpdate,
    ]
):
    """Item 모델에 특화된 CRUD 작업을 처리합니다."""

    nullable_fields = frozenset({"size", "color"})

    async def get_or_404(self, db: AsyncSession, id: int) -> inv_models.Item:
        item = await self.get(db, id)
        if item is None:
            raise NotFoundError("Item", id)
        return item

    async def create_for_owner(
        self, db: AsyncSession, *, obj_in: inv_schemas.ItemCreate, owner_id: Optional[int]
    ) -> inv_models.Item:
        """새 품목을 등록합니다. 초기 수량은 0 이상이어야 합니다 (스키마에서 검증)."""
        db_obj = inv_models.Item.model_validate(obj_in, update={"owner_id": owner_id})
        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        logger.info("품목 등록: item=%s name=%s quantity=%s", db_obj.id, db_obj.name, db_obj.quantity)
        return db_obj

    async def list_page(
        self,
        db: AsyncSession,
        *,
        page: int,
        limit: int,
        type: Optional[str] = None,
        color: Optional[str] = None,
        size: Optional[str] = None,
    ) -> Dict[str, Any]:
        """유형/색상 부분 일치, 사이즈 완전 일치로 필터링한 품목 목록 (최신 등록순)"""
        conditions = []
        if type:
            conditions.append(self.model.type.icontains(type, autoescape=True))
        if color:
            conditions.append(self.model.color.icontains(color, autoescape=True))
        return await self.get_page(
            db,
            page=page,
            limit=limit,
            filters={"size": size},
            conditions=conditions,
            order_by_field="created_at",
        )

    async def search_by_name(self, db: AsyncSession, *, term: str, limit: int = 10) -> List[inv_models.Item]:
        """이름 부분 일치(대소문자 무시) 검색. 자동완성용으로 이름순 정렬합니다."""
        query = (
            select(self.model)
            .where(self.model.name.icontains(term, autoescape=True))
            .order_by(self.model.name, self.model.id)
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def count_references(self, db: AsyncSession, *, item_id: int) -> int:
        purchase_lines = await db.execute(
            select(func.count()).select_from(pur_models.PurchaseItem).where(pur_models.PurchaseItem.item_id == item_id)
        )
        write_downs = await db.execute(
            select(func.count()).select_from(wdn_models.WriteDown).where(wdn_models.WriteDown.item_id == item_id)
        )
        return purchase_lines.scalar_one() + write_downs.scalar_one()

    async def remove(self, db: AsyncSession, *, id: int) -> inv_models.Item:
        """
        품목을 삭제합니다. 구매 품목 또는 재고 차감 기록이 참조 중이면 거부합니다.
        검사와 삭제 사이에 참조가 생기면 DB의 외래 키(RESTRICT)가 막고, 이 역시 ConflictError로 변환됩니다.
        """
        item = await self.get_or_404(db, id)
        if await self.count_references(db, item_id=id):
            raise ConflictError(
                "Cannot delete item: it is referenced by purchases or write-downs.", item_id=id
            )
        try:
            await db.delete(item)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning("품목 삭제 실패 (외래 키 참조): item=%s", id)
            raise ConflictError(
                "Cannot delete item: it is referenced by purchases or write-downs.", item_id=id
            )
        logger.info("품목 삭제: item=%s", id)
        return item


#  CRUD 클래스의 인스턴스 생성
item = ItemCRUD(inv_models.Item)
