# app/domains/pur/schemas.py

"""
'pur' 도메인 (구매 및 구매 품목)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from sqlmodel import SQLModel

from app.domains.inv.schemas import ItemSnapshot
from app.domains.inv.services import ById, ByName, ItemRef
from app.domains.pur.models import PaymentMethod


# =============================================================================
# 1. 구매 품목 (PurchaseItem) 스키마
# =============================================================================
class PurchaseLineIn(SQLModel):
    """
    구매 품목 입력. 품목은 item_id 또는 item_name 중 정확히 하나로 지정합니다.
    item_name은 대소문자를 무시한 완전 일치, 없으면 부분 일치로 찾습니다.
    """
    item_id: Optional[int] = Field(None, description="품목 ID")
    item_name: Optional[str] = Field(None, max_length=100, description="품목명")
    # 양수 검사는 서비스 계층에서 InvalidArgumentError로 처리합니다.
    quantity: int = Field(..., description="구매 수량")
    unit_cost: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2, description="구매 단가")

    @model_validator(mode="after")
    def check_item_reference(self) -> "PurchaseLineIn":
        if (self.item_id is None) == (self.item_name is None):
            raise ValueError("exactly one of 'item_id' or 'item_name' must be given")
        return self

    def to_ref(self) -> ItemRef:
        if self.item_id is not None:
            return ById(self.item_id)
        return ByName(self.item_name)


class PurchaseItemUpdate(SQLModel):
    quantity: Optional[int] = None
    unit_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class PurchaseItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    purchase_id: int
    item_id: int
    quantity: int
    unit_cost: Decimal
    item: Optional[ItemSnapshot] = None

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return self.unit_cost * self.quantity


# =============================================================================
# 2. 구매 (Purchase) 스키마
# =============================================================================
class PurchaseCreate(SQLModel):
    supplier: str = Field(..., min_length=1, max_length=100, description="공급처명")
    supplier_phone: Optional[str] = Field(None, max_length=30)
    payment_method: Optional[PaymentMethod] = None
    purchase_date: date = Field(default_factory=date.today, description="구매일")
    amount_paid: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2, description="실제 지불 금액")
    items: List[PurchaseLineIn] = Field(default_factory=list, description="구매 품목 목록")


class PurchaseUpdate(SQLModel):
    """헤더 정보만 수정합니다 (확정 전까지)."""
    supplier: Optional[str] = Field(None, min_length=1, max_length=100)
    supplier_phone: Optional[str] = Field(None, max_length=30)
    payment_method: Optional[PaymentMethod] = None
    purchase_date: Optional[date] = None
    amount_paid: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class PurchaseFinalize(SQLModel):
    notes: Optional[str] = Field(None, description="확정 시 남길 비고")


class PurchaseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    supplier: str
    supplier_phone: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    purchase_date: date
    amount_paid: Decimal
    finalized: bool
    finalized_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[PurchaseItemResponse] = []

    @computed_field
    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.items)

    @computed_field
    @property
    def items_value(self) -> Decimal:
        return sum((line.line_total for line in self.items), Decimal("0"))


class PurchasePage(BaseModel):
    data: List[PurchaseResponse]
    pagination: Dict[str, Any]


# =============================================================================
# 3. 확정 / 통계 / 보고서 스키마
# =============================================================================
class FinalizedLine(BaseModel):
    item_id: int
    name: str
    added: int
    new_quantity: int


class PurchaseFinalizeResponse(BaseModel):
    purchase_id: int
    finalized_at: datetime
    amount_paid: Decimal
    items_updated: List[FinalizedLine]


class PurchaseStatistics(BaseModel):
    period: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    total_purchases: int
    total_paid: Decimal
    average_paid: Decimal
    total_quantity: int


class PurchaseReportPeriod(BaseModel):
    start: datetime
    end: datetime


class PurchaseReport(BaseModel):
    period: PurchaseReportPeriod
    summary: PurchaseStatistics
    purchases: List[PurchaseResponse]
