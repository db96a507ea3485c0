# app/domains/wdn/models.py

"""
'wdn' 도메인 (PostgreSQL 'wdn' 스키마)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

재고 차감 기록(write-down)은 생성 시 품목 재고를 줄이고, 삭제 시 같은 수량을 되돌립니다.
생성 후에는 사유(reason)와 메모(note)만 수정할 수 있습니다.
"""

from typing import Optional, TYPE_CHECKING
from datetime import datetime, UTC
from enum import Enum
from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

if TYPE_CHECKING:
    from app.domains.inv.models import Item


class WriteDownReason(str, Enum):
    """재고 차감 사유 코드"""
    LOSS = "Loss"
    THEFT = "Theft"
    INTERNAL_USE = "InternalUse"
    OBSOLESCENCE = "Obsolescence"
    STAINED = "Stained"
    DEFECT = "Defect"
    DONATION = "Donation"


# =============================================================================
# 1. wdn.write_downs 테이블 모델
# =============================================================================
class WriteDownBase(SQLModel):
    item_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("inv.items.id", onupdate="CASCADE", ondelete="RESTRICT"),
            nullable=False,
            index=True,
        ),
        description="차감 대상 품목 ID (FK)"
    )
    quantity: int = Field(description="차감 수량 (양의 정수, 생성 후 변경 불가)")
    reason: WriteDownReason = Field(description="차감 사유")
    note: Optional[str] = Field(default=None, max_length=500, description="메모")


class WriteDown(WriteDownBase, table=True):
    __tablename__ = "write_downs"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_write_downs_quantity_positive"),
        {'schema': 'wdn'},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True),
        description="차감 일시 (레코드 생성 일시)"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )

    # 단방향 관계: Item 쪽에는 역참조 컬렉션을 두지 않아 ORM 캐스케이드가 생기지 않습니다.
    item: Optional["Item"] = Relationship(sa_relationship_kwargs={"lazy": "raise"})
