# app/domains/usr/models.py

"""
'usr' 스키마의 사용자 테이블 모델입니다.

재고 원장에서 사용자는 두 곳에서만 쓰입니다.
- 품목 등록자(inv.items.owner_id) 참조
- 엔드포인트 권한 확인 (삭제 계열은 ADMIN 전용)
"""

from typing import Optional
from datetime import datetime, UTC
from enum import IntEnum
from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


class UserRole(IntEnum):
    """DB에는 정수로 저장되는 역할 코드. 값이 작을수록 권한이 큽니다."""
    ADMIN = 10              # 품목/구매 삭제 가능
    STOCK_MANAGER = 60      # 재고 담당 (입고 확정, 차감 기록)
    GENERAL_USER = 100      # 조회 및 일반 등록


# =============================================================================
# usr.users
# =============================================================================
class UserBase(SQLModel):
    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(max_length=50, sa_column_kwargs={"unique": True}, description="로그인 ID")
    password_hash: str = Field(max_length=255, description="bcrypt 해시")
    email: Optional[str] = Field(default=None, max_length=100, sa_column_kwargs={"unique": True})
    full_name: Optional[str] = Field(default=None, max_length=100)
    role: UserRole = Field(default=UserRole.GENERAL_USER, description="역할 코드")
    is_active: bool = Field(default=True, description="False면 로그인/요청 거부")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
    )


class User(UserBase, table=True):
    __tablename__ = "users"
    __table_args__ = {'schema': 'usr'}
