# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 환경에 맞게 작성되었습니다.
"""

import logging
import math
from typing import Generic, List, Optional, Type, TypeVar, Any, Dict, FrozenSet, Sequence, Tuple
from datetime import date, datetime, time, timedelta, UTC

from sqlalchemy import DateTime, func
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def _day_bound(day: date, is_timestamp: bool) -> date:
    """TIMESTAMP 컬럼과 비교할 때는 날짜를 UTC 자정 시각으로 변환합니다."""
    if is_timestamp and not isinstance(day, datetime):
        return datetime.combine(day, time.min, tzinfo=UTC)
    return day


def page_window(page: int, limit: int) -> Tuple[int, int, int]:
    """
    (page, limit)을 정규화하여 (page, limit, offset)을 반환합니다.
    page는 1부터 시작하며, limit은 1 ~ MAX_PAGE_SIZE 범위로 제한됩니다.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    # update()에서 명시적 null을 허용하는 필드. 그 외 필드의 null은 무시합니다 (NOT NULL 컬럼 보호).
    nullable_fields: FrozenSet[str] = frozenset()

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 단일 레코드를 조회합니다.
        """
        return await db.get(self.model, id)

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalar_one_or_none()

    def _build_conditions(
        self,
        *,
        filters: Optional[Dict[str, Any]] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        conditions: Optional[Sequence[Any]] = None,
    ) -> List[Any]:
        where = list(conditions or [])

        # 1. 다중 속성 필터링 (값이 None인 항목은 건너뜀)
        if filters:
            for attribute, value in filters.items():
                if value is None:
                    continue
                if hasattr(self.model, attribute):
                    where.append(getattr(self.model, attribute) == value)
                else:
                    logger.warning("Model %s has no attribute '%s'", self.model.__name__, attribute)

        # 2. 기간 검색 필터링
        if date_range_field and hasattr(self.model, date_range_field):
            date_field = getattr(self.model, date_range_field)
            is_timestamp = isinstance(date_field.type, DateTime)
            if start_date is not None:
                where.append(date_field >= _day_bound(start_date, is_timestamp))
            if end_date is not None:
                # end_date 당일까지 포함하기 위함
                where.append(date_field < _day_bound(end_date + timedelta(days=1), is_timestamp))
        elif date_range_field:
            logger.warning(
                "Model %s has no attribute '%s' for date range filtering.", self.model.__name__, date_range_field
            )
        return where

    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,  # 다중 속성 필터: {"attribute_name": "value"}
        date_range_field: Optional[str] = None,    # 기간 검색을 적용할 날짜 필드 이름 (예: "created_at")
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        conditions: Optional[Sequence[Any]] = None,  # 부분 일치/범위 등 추가 SQL 조건
        order_by_field: Optional[str] = None,
        order_desc: bool = True,
        options: Optional[Sequence[Any]] = None,   # selectinload 등 로더 옵션
        skip: int = 0,
        limit: int = 100
    ) -> List[ModelType]:
        """
        다중 속성 및 기간 검색 기능을 포함한 다중 조회.
        """
        query = select(self.model)
        where = self._build_conditions(
            filters=filters, date_range_field=date_range_field,
            start_date=start_date, end_date=end_date, conditions=conditions,
        )
        if where:
            query = query.where(*where)
        if options:
            query = query.options(*options)

        # 3. 정렬
        if order_by_field and hasattr(self.model, order_by_field):
            column = getattr(self.model, order_by_field)
            query = query.order_by(column.desc() if order_desc else column, self.model.id.desc())
        else:
            if order_by_field:
                logger.warning("Model %s has no attribute '%s' for ordering.", self.model.__name__, order_by_field)
            query = query.order_by(self.model.id.desc())

        # 4. 페이징
        query = query.offset(skip).limit(limit)

        result = await db.execute(query)
        return result.scalars().all()

    async def count_filtered(
        self,
        db: AsyncSession,
        *,
        filters: Optional[Dict[str, Any]] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        conditions: Optional[Sequence[Any]] = None,
    ) -> int:
        """get_filtered와 같은 조건을 만족하는 전체 레코드 수를 반환합니다."""
        query = select(func.count()).select_from(self.model)
        where = self._build_conditions(
            filters=filters, date_range_field=date_range_field,
            start_date=start_date, end_date=end_date, conditions=conditions,
        )
        if where:
            query = query.where(*where)
        result = await db.execute(query)
        return result.scalar_one()

    async def get_page(
        self,
        db: AsyncSession,
        *,
        page: int = 1,
        limit: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
        date_range_field: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        conditions: Optional[Sequence[Any]] = None,
        order_by_field: Optional[str] = None,
        order_desc: bool = True,
        options: Optional[Sequence[Any]] = None,
    ) -> Dict[str, Any]:
        """
        페이지 단위 조회 결과를 `{data, pagination}` 형태로 반환합니다.
        """
        page, limit, offset = page_window(page, limit or settings.DEFAULT_PAGE_SIZE)
        criteria = dict(
            filters=filters, date_range_field=date_range_field,
            start_date=start_date, end_date=end_date, conditions=conditions,
        )
        rows = await self.get_filtered(
            db, **criteria, order_by_field=order_by_field, order_desc=order_desc,
            options=options, skip=offset, limit=limit,
        )
        total = await self.count_filtered(db, **criteria)
        return {"data": rows, "pagination": pagination_meta(page, limit, total)}

    def updatable_data(self, obj_in: UpdateSchemaType) -> Dict[str, Any]:
        return {
            key: value
            for key, value in obj_in.model_dump(exclude_unset=True).items()
            if value is not None or key in self.nullable_fields
        }

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다.
        nullable_fields에 없는 필드로 들어온 null 값은 건너뜁니다.
        """
        for key, value in self.updatable_data(obj_in).items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        await db.refresh(db_obj)
        return db_obj

