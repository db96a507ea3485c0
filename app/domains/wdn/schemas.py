# app/domains/wdn/schemas.py

"""
'wdn' 도메인 (재고 차감 기록)의 Pydantic 스키마를 정의하는 모듈입니다.
"""

from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from pydantic import Field
from sqlmodel import SQLModel

from app.domains.inv.schemas import ItemSnapshot
from app.domains.wdn.models import WriteDownReason


# =============================================================================
# 1. wdn.write_downs 테이블 스키마
# =============================================================================
class WriteDownCreate(SQLModel):
    item_id: int = Field(..., description="차감 대상 품목 ID")
    # 양수 검사는 서비스 계층에서 InvalidArgumentError로 처리합니다.
    quantity: int = Field(..., description="차감 수량")
    reason: WriteDownReason = Field(..., description="차감 사유")
    note: Optional[str] = Field(None, max_length=500, description="메모")


class WriteDownUpdate(SQLModel):
    """설명 필드만 수정 가능합니다 (item_id, quantity는 원장과 어긋나므로 변경 불가)."""
    reason: Optional[WriteDownReason] = None
    note: Optional[str] = Field(None, max_length=500)


class WriteDownResponse(SQLModel):
    id: int
    item_id: int
    quantity: int
    reason: WriteDownReason
    note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    item: Optional[ItemSnapshot] = None

    class Config:
        from_attributes = True


class WriteDownPage(SQLModel):
    data: List[WriteDownResponse]
    pagination: Dict[str, Any]


class WriteDownDeleteResponse(SQLModel):
    id: int
    item_id: int
    restored_quantity: int
    current_quantity: int


# =============================================================================
# 2. 통계 / 보고서 스키마
# =============================================================================
class ReasonBreakdown(SQLModel):
    count: int = 0
    quantity: int = 0
    value: Decimal = Decimal("0")


class WriteDownStatistics(SQLModel):
    period: str
    since: datetime
    total_count: int
    total_quantity: int
    by_reason: Dict[str, ReasonBreakdown]


class ReportPeriod(SQLModel):
    start: datetime
    end: datetime


class WriteDownReportSummary(SQLModel):
    total_write_downs: int
    total_quantity: int
    total_value: Decimal


class WriteDownReport(SQLModel):
    period: ReportPeriod
    filters: Dict[str, Any]
    summary: WriteDownReportSummary
    write_downs: List[WriteDownResponse]
