# app/domains/inv/models.py

"""
'inv' 도메인 (PostgreSQL 'inv' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

`Item.quantity`는 재고 수량의 유일한 원본(authoritative) 컬럼이며,
app.domains.inv.services.adjust_quantity()를 통해서만 변경됩니다.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal
from sqlmodel import Field, SQLModel, Column
from sqlalchemy import CheckConstraint, Integer, Numeric
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 1. inv.items 테이블 모델
# =============================================================================
class ItemBase(SQLModel):
    name: str = Field(max_length=100, index=True, description="품목명")
    type: str = Field(max_length=50, description="품목 유형 (예: 셔츠, 바지)")
    size: Optional[str] = Field(default=None, max_length=20, description="사이즈")
    color: Optional[str] = Field(default=None, max_length=30, description="색상")
    unit_price: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, server_default="0"),
        description="판매 단가"
    )
    owner_id: Optional[int] = Field(default=None, foreign_key="usr.users.id", description="등록 사용자 ID (FK)")


class Item(ItemBase, table=True):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
        {'schema': 'inv'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    quantity: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
        description="현재 재고 수량 (항상 0 이상)"
    )
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )
