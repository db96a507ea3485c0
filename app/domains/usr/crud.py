# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업과 사용자 인증 로직을 담당하는 모듈입니다.
"""

from typing import Optional
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import ConflictError
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas


class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_username(self, db: AsyncSession, *, username: str) -> Optional[usr_models.User]:
        """사용자명으로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="username", value=username)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        return await self.get_by_attribute(db, attribute="email", value=email)

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 중복을 검사합니다."""
        if await self.get_by_username(db, username=obj_in.username):
            raise ConflictError("Username already registered")
        if obj_in.email and await self.get_by_email(db, email=obj_in.email):
            raise ConflictError("Email already registered")

        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        return db_user

    async def authenticate(self, db: AsyncSession, *, username: str, password: str) -> Optional[usr_models.User]:
        """사용자명과 비밀번호를 사용하여 사용자를 인증합니다."""
        user = await self.get_by_username(db, username=username)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user


user = CRUDUser()
