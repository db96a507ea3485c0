# app/domains/usr/routers.py

"""
로그인(토큰 발급)과 현재 사용자 조회 엔드포인트입니다.
재고/구매/차감 라우터는 여기서 발급한 bearer 토큰으로 사용자를 확인합니다.
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.database import get_session
from app.core import dependencies as deps

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth (로그인)"])


@router.post("/auth/token", response_model=usr_schemas.Token, summary="로그인 후 access token 발급")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_session),
):
    user = await usr_crud.user.authenticate(db, username=form_data.username, password=form_data.password)
    if not user:
        logger.info("로그인 실패: username=%s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")

    token = deps.create_access_token(
        data={"sub": user.username},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"access_token": token, "token_type": "bearer"}


@router.get("/auth/me", response_model=usr_schemas.UserRead, summary="현재 사용자")
async def read_users_me(current_user: usr_models.User = Depends(deps.get_current_active_user)):
    return current_user
