# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트에 대한 통합 테스트를 정의하는 모듈입니다.

- 애플리케이션의 루트 경로 (`/`) 응답을 테스트합니다.
- 데이터베이스 연결 헬스 체크 엔드포인트 (`/health-check`)를 테스트합니다.
- ARQ 워커 설정에 태스크가 등록되어 있는지 확인합니다.
"""

import pytest
from httpx import AsyncClient

from app.main import ArqWorkerSettings, worker_functions
from app.core import tasks as core_tasks
from app.domains.inv import tasks as inv_tasks


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to RSMS API. Visit /docs for interactive API documentation."}


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health-check")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


def test_worker_settings_register_tasks():
    assert core_tasks.health_check_database_task in worker_functions
    assert inv_tasks.audit_stock_ledger_task in worker_functions
    assert len(ArqWorkerSettings.cron_jobs) == 2
