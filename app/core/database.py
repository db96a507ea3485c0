# app/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
- 재고를 변경하는 모든 작업이 사용하는 트랜잭션 범위(transaction_scope)를 제공합니다.
- 애플리케이션 시작 시 데이터베이스 스키마/테이블을 생성하는 함수를 포함합니다 (개발용).
"""

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy import text

from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

logger = logging.getLogger(__name__)

# 도메인별 PostgreSQL 스키마 (테이블 생성 전에 존재해야 합니다)
SCHEMA = ['usr', 'inv', 'pur', 'wdn']


# SQLModel 엔진을 생성합니다.
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL.get_secret_value(),  # SecretStr 값에 접근
    echo=settings.DEBUG_MODE,  # 디버그 모드일 때만 SQL 쿼리 출력
    future=True,
    pool_recycle=3600,  # 1시간마다 연결 재활용
    pool_size=10,
    max_overflow=20
)

# 비동기 세션을 생성하는 '세션 공장'을 정의합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

metadata = SQLModel.metadata


# =============================================================================
# 데이터베이스 초기화 및 테이블 생성 함수
# =============================================================================
async def create_db_and_tables() -> None:
    """
    데이터베이스 스키마 및 테이블을 생성합니다.
    개발 환경에서만 사용해야 하며, 운영 환경에서는 Alembic 마이그레이션을 사용합니다.
    """
    # 모든 모델이 metadata에 등록되도록 임포트합니다.
    import app.domains.models  # noqa: F401

    async with engine.begin() as conn:
        for schema_name in SCHEMA:
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("데이터베이스 스키마/테이블 생성 완료: %s", ", ".join(SCHEMA))


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 자동으로 닫습니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    ARQ Task 등 요청 밖의 비동기 컨텍스트에서 사용할 수 있는
    독립적인 비동기 DB 세션을 제공하는 컨텍스트 관리자입니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction_scope(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    주어진 세션 위에서 하나의 원자적 작업 단위를 실행합니다.

    블록이 정상 종료되면 커밋하고, 어떤 예외든 발생하면 롤백한 뒤 그대로 다시 던집니다.
    블록 안에서 잡은 행 잠금(SELECT ... FOR UPDATE)은 커밋/롤백 시점까지 유지되므로,
    재고 수량의 읽기-계산-쓰기는 반드시 이 범위 안에서 이루어져야 합니다.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
