# app/domains/inv/tasks.py

import logging
from typing import Any, Dict

from sqlalchemy import func
from sqlmodel import select

from app.core.database import get_async_session_context
from app.domains.inv import models as inv_models

logger = logging.getLogger(__name__)


async def audit_stock_ledger_task(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """
    재고 원장 점검 태스크.
    DB 제약(quantity >= 0)이 지켜지는 한 음수 재고는 나올 수 없으며, 발견되면 오류로 기록합니다.
    """
    async with get_async_session_context() as db:
        query = select(inv_models.Item.id).where(inv_models.Item.quantity < 0).order_by(inv_models.Item.id)
        negative_ids = (await db.execute(query)).scalars().all()
        total_items = (await db.execute(select(func.count()).select_from(inv_models.Item))).scalar_one()

    if negative_ids:
        logger.error("재고 원장 점검: 음수 재고 품목 %s개 발견 %s", len(negative_ids), list(negative_ids))
        return {"status": "failed", "checked": total_items, "negative_item_ids": list(negative_ids)}

    logger.info("재고 원장 점검: 품목 %s개 정상", total_items)
    return {"status": "ok", "checked": total_items, "negative_item_ids": []}
