# migrations/env.py

import os
import sys
import asyncio
import logging
from logging.config import fileConfig

from alembic import context

from sqlalchemy import pool, text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import SQLModel

# --- 1. 프로젝트 루트 경로 설정 ---
# env.py가 어디에서 실행되든 'app' 모듈을 찾을 수 있게 합니다.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# --- 2. 애플리케이션의 핵심 설정 및 모든 모델 임포트 ---
from app.core.config import settings        # noqa: E402
from app.core.database import SCHEMA        # noqa: E402

#  모든 SQLModel 클래스가 SQLModel.metadata에 등록되도록 명시적으로 임포트합니다.
import app.domains.models                   # noqa: F401, E402

# --- 3. Alembic 기본 설정 ---
config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = SQLModel.metadata


def include_object(object, name, type_, reflected, compare_to):
    if type_ == "table" and name == "alembic_version":
        return False
    return True


def do_run_migrations(connection) -> None:
    """
    Alembic 컨텍스트를 데이터베이스 연결로 구성하고 마이그레이션을 실행합니다.
    """
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        include_schemas=True,  # 여러 스키마(usr, inv, pur, wdn)를 사용하므로 필수
        version_table_schema='public',  # alembic_version 테이블 위치
        include_object=include_object,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """'온라인' 모드에서 실제 데이터베이스에 연결하여 마이그레이션을 실행합니다."""
    engine: AsyncEngine = create_async_engine(
        settings.DATABASE_URL.get_secret_value(),
        echo=settings.DEBUG_MODE,
        future=True,
        poolclass=pool.NullPool,  # 마이그레이션 시에는 풀을 사용하지 않아 즉시 연결/해제
    )

    # --- 1단계: 스키마 생성 전용 연결 ---
    async with engine.connect() as connection:
        logger.info("Ensuring all schemas exist before migration: %s", ", ".join(SCHEMA))
        async with connection.begin():
            for schema_name in SCHEMA:
                await connection.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema_name}"))

    # --- 2단계: Alembic 마이그레이션 전용 연결 ---
    async with engine.connect() as connection:
        logger.info("Running Alembic migrations...")
        await connection.run_sync(do_run_migrations)

    await engine.dispose()
    logger.info("Alembic migrations finished.")


if context.is_offline_mode():
    raise NotImplementedError("Offline mode is not supported in this configuration.")
else:
    asyncio.run(run_migrations_online())
