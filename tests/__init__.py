# tests/__init__.py

"""
RSMS FastAPI 애플리케이션의 테스트 스위트 패키지입니다.

`pytest`, `pytest-asyncio`, `httpx` 기반으로 작성되며, PostgreSQL 테스트 데이터베이스를 사용합니다.

- `domains/`: 도메인(usr, inv, wdn, pur)별 서비스/CRUD 및 API 통합 테스트.
- `test_unit.py`: 데이터베이스 없이 실행되는 순수 함수 테스트.
- `conftest.py`: 테스트 엔진, 테스트별 트랜잭션 세션, 인증 클라이언트 등 공용 픽스처.
"""

__title__ = "RSMS API Tests"
__description__ = "Test suite for RSMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
