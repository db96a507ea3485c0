# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

PostgreSQL의 'usr' 스키마에 해당하는 사용자 모델과 인증(토큰 발급, 현재 사용자 조회)을 담당합니다.
재고 원장 관점에서는 외부 협력자이며, 품목 소유자 참조와 엔드포인트 권한 확인에만 사용됩니다.

주요 서브모듈:
- `models.py`: 'usr' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 사용자/토큰 Pydantic 스키마.
- `crud.py`: 사용자 조회/생성 및 인증 로직.
- `routers.py`: 로그인 및 현재 사용자 조회 엔드포인트.
"""

__title__ = "RSMS User Domain"
__description__ = "Manages users and handles authentication."
__version__ = "0.1.0"
__all__ = []
