# app/domains/usr/schemas.py

"""
사용자 생성/조회와 로그인 토큰 응답 스키마입니다.
비밀번호 해시는 어떤 응답 스키마에도 포함하지 않습니다.
"""

from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field
from pydantic import BaseModel, EmailStr

from . import models as usr_models


class UserBase(SQLModel):
    username: str = Field(..., max_length=50)
    email: Optional[EmailStr] = Field(None, max_length=100)
    full_name: Optional[str] = Field(None, max_length=100)
    role: usr_models.UserRole = Field(default=usr_models.UserRole.GENERAL_USER)
    is_active: bool = True


class UserCreate(UserBase):
    """관리 스크립트(create-admin)와 테스트에서 사용합니다."""
    password: str = Field(..., min_length=8)


class UserUpdate(SQLModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = None
    role: Optional[usr_models.UserRole] = None
    is_active: Optional[bool] = None


class UserRead(UserBase):
    id: int
    created_at: datetime
    updated_at: datetime


class Token(BaseModel):
    """POST /usr/auth/token 응답 (OAuth2 bearer)"""
    access_token: str
    token_type: str
