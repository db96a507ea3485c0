# app/domains/pur/models.py

"""
'pur' 도메인 (PostgreSQL 'pur' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.
"""

from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, date, UTC
from decimal import Decimal
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

if TYPE_CHECKING:
    from app.domains.inv.models import Item


class PaymentMethod(str, Enum):
    PIX = "Pix"
    CASH = "Cash"
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    BANK_SLIP = "BankSlip"
    CHECK = "Check"
    TRANSFER = "Transfer"


# =============================================================================
# 1. pur.purchases 테이블 모델
# =============================================================================
class PurchaseBase(SQLModel):
    supplier: str = Field(max_length=100, index=True, description="공급처명")
    supplier_phone: Optional[str] = Field(default=None, max_length=30, description="공급처 연락처")
    payment_method: Optional[PaymentMethod] = Field(default=None, description="결제 수단")
    purchase_date: date = Field(index=True, description="구매일")
    amount_paid: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, server_default="0"),
        description="실제 지불 금액"
    )


class Purchase(PurchaseBase, table=True):
    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("amount_paid >= 0", name="ck_purchases_amount_paid_non_negative"),
        {'schema': 'pur'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    finalized: bool = Field(default=False, description="확정 여부 (false -> true 단방향)")
    finalized_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="확정 일시"
    )
    notes: Optional[str] = Field(default=None, description="비고 (확정 시 기록 가능)")
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

    # 구매 품목 삭제는 명시적인 DELETE 문으로 처리하므로 ORM 캐스케이드를 쓰지 않습니다.
    items: List["PurchaseItem"] = Relationship(
        back_populates="purchase",
        sa_relationship_kwargs={
            "lazy": "raise",
            "passive_deletes": "all",
            "order_by": "PurchaseItem.id",
        },
    )


# =============================================================================
# 2. pur.purchase_items 테이블 모델
# =============================================================================
class PurchaseItemBase(SQLModel):
    purchase_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("pur.purchases.id", onupdate="CASCADE", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        description="구매 ID (FK)"
    )
    item_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("inv.items.id", onupdate="CASCADE", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        description="품목 ID (FK)"
    )
    quantity: int = Field(description="구매 수량 (양의 정수)")
    unit_cost: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(12, 2), nullable=False, server_default="0"),
        description="구매 단가"
    )


class PurchaseItem(PurchaseItemBase, table=True):
    __tablename__ = "purchase_items"
    __table_args__ = (
        UniqueConstraint("purchase_id", "item_id", name="uq_purchase_items_purchase_item"),
        CheckConstraint("quantity > 0", name="ck_purchase_items_quantity_positive"),
        CheckConstraint("unit_cost >= 0", name="ck_purchase_items_unit_cost_non_negative"),
        {'schema': 'pur'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
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

    purchase: Optional[Purchase] = Relationship(back_populates="items", sa_relationship_kwargs={"lazy": "raise"})
    # 단방향 관계: Item 쪽에는 역참조 컬렉션을 두지 않습니다.
    item: Optional["Item"] = Relationship(sa_relationship_kwargs={"lazy": "raise"})
