# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

주요 서브모듈은 다음과 같습니다:

- `config.py`: 애플리케이션의 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 데이터베이스 연결, 세션 관리, 트랜잭션 범위 (SQLModel 및 AsyncSQLAlchemy).
- `exceptions.py`: 재고 원장 예외 체계와 HTTP 응답 변환 핸들러.
- `crud_base.py`: 공통 CRUD 기반 클래스와 페이지 계산.
- `periods.py`: 통계/보고서 기간 계산.
- `security.py`: 비밀번호 해싱, JWT 발급/검증.
- `dependencies.py`: FastAPI 의존성 주입에서 사용하는 공통 의존성 함수들.
- `tasks.py`: 공통 ARQ 태스크 (데이터베이스 헬스 체크).
"""

__title__ = "RSMS Core"
__description__ = "Core components for RSMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
