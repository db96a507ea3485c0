# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from arq.connections import create_pool, RedisSettings
from arq.cron import cron
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session
from app.core.exceptions import register_exception_handlers
from app import API_PREFIX

# 모든 도메인 모델이 metadata에 등록되도록 임포트합니다 (관계 문자열 해석에 필요).
import app.domains.models  # noqa: F401

# 태스크 모듈 임포트
from app.core import tasks as core_tasks
from app.domains.inv import tasks as inv_tasks

# 도메인 라우터 임포트
from app.domains.usr.routers import router as usr_router
from app.domains.inv.routers import router as inv_router
from app.domains.pur.routers import router as pur_router
from app.domains.wdn.routers import router as wdn_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
    inv_tasks.audit_stock_ledger_task,
]


# ARQ 워커 설정 클래스 (실행: arq app.main.ArqWorkerSettings)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매일 00:00 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour=0, minute=0, timeout=300, keep_result=600),
        # 매일 01:00 음수 재고 점검
        cron(inv_tasks.audit_stock_ledger_task, hour=1, minute=0, timeout=1800, keep_result=3600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    Redis에 연결할 수 없으면 백그라운드 작업 없이 API만 시작합니다.
    """
    logger.info("FastAPI 애플리케이션 시작 중... (스키마 변경은 Alembic 사용)")
    app.state.redis = None
    try:
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis 커넥션 풀 생성 완료.")
    except (RedisError, OSError) as e:
        logger.warning("ARQ Redis 커넥션 풀 생성 실패, 백그라운드 작업 비활성화: %s", e)

    yield  # 애플리케이션 실행

    logger.info("FastAPI 애플리케이션 종료 중...")
    if app.state.redis is not None:
        await app.state.redis.close()
        logger.info("ARQ Redis 연결 풀 종료 완료.")
    await engine.dispose()
    logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title="RSMS API",
    description="Retail Stock Management System (RSMS) API: items, purchases, write-downs and the stock ledger.",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 프로덕션에서는 allow_origins를 실제 프론트엔드 도메인으로 제한해야 합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 재고 원장 예외 -> HTTP 응답 변환 --
register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=f"{API_PREFIX}/usr", tags=["User Management (사용자 관리)"])
app.include_router(inv_router, prefix=f"{API_PREFIX}/inv", tags=["Inventory Management (품목 및 재고 관리)"])
app.include_router(pur_router, prefix=f"{API_PREFIX}/pur", tags=["Purchase Management (구매 관리)"])
app.include_router(wdn_router, prefix=f"{API_PREFIX}/wdn", tags=["Write-Down Management (재고 차감 관리)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    """
    RSMS API의 루트 엔드포인트입니다.
    API의 시작점을 알리고 문서 링크를 제공합니다.
    """
    return {"message": "Welcome to RSMS API. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: Session = Depends(get_session)):
    """
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(1))
        if result.first():
            return {"status": "ok", "database_connection": "successful"}
    except SQLAlchemyError as e:
        logger.error("헬스 체크 중 데이터베이스 오류: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database connection error during health check: {e}"
        )
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Database health check failed: No result from test query"
    )


# if __name__ == "__main__":
#     import uvicorn
#     uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
