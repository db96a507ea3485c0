# app/domains/inv/schemas.py

"""
'inv' 도메인 (PostgreSQL 'inv' 스키마)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from sqlmodel import SQLModel


# =============================================================================
# 1. inv.items 테이블 스키마
# =============================================================================
class ItemBase(SQLModel):
    name: str = Field(..., min_length=1, max_length=100, description="품목명")
    type: str = Field(..., min_length=1, max_length=50, description="품목 유형")
    size: Optional[str] = Field(None, max_length=20, description="사이즈")
    color: Optional[str] = Field(None, max_length=30, description="색상")
    unit_price: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2, description="판매 단가")


class ItemCreate(ItemBase):
    quantity: int = Field(0, ge=0, description="입고 시 초기 재고 수량")


class ItemUpdate(SQLModel):
    """설명 필드만 수정합니다. 재고 수량은 재고 조정 API로만 변경됩니다."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    size: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=30)
    unit_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)


class ItemResponse(ItemBase):
    id: int = Field(..., description="품목 고유 ID")
    quantity: int = Field(..., description="현재 재고 수량")
    owner_id: Optional[int] = Field(None, description="등록 사용자 ID")
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")

    class Config:
        from_attributes = True


class ItemSnapshot(SQLModel):
    """다른 도메인 응답에 포함되는 품목 요약 정보"""
    id: int
    name: str
    type: str
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: Decimal
    quantity: int

    class Config:
        from_attributes = True


class ItemPage(SQLModel):
    data: List[ItemResponse]
    pagination: Dict[str, Any]


# =============================================================================
# 2. 재고 조정 (Direct Adjustment) 스키마
# =============================================================================
class QuantityRequest(SQLModel):
    # 양수 검사는 서비스 계층에서 InvalidArgumentError로 처리합니다.
    quantity: int = Field(..., description="가감할 수량 (양의 정수)")


class QuantityResponse(SQLModel):
    item_id: int
    quantity: int


class AddQuantityResponse(SQLModel):
    item_id: int
    previous: int
    added: int
    current: int


class RemoveQuantityResponse(SQLModel):
    item_id: int
    previous: int
    removed: int
    current: int
