# app/domains/inv/__init__.py

"""
FastAPI 애플리케이션의 'inv' 도메인 패키지입니다.

이 패키지는 PostgreSQL의 'inv' 스키마에 해당하는 품목(Item) 모델과
재고 원장의 품목 저장소(Item Store), 직접 재고 조정 API를 포함합니다.

'inv' 도메인은 품목별 현재 재고 수량(quantity)의 유일한 원본을 관리하며,
수량 변경은 행 잠금(SELECT ... FOR UPDATE) 아래에서 services.adjust_quantity()로만 이루어집니다.

주요 서브모듈:
- `models.py`: 'inv' 스키마의 테이블에 매핑되는 SQLModel 정의.
- `schemas.py`: 품목 및 재고 조정 요청/응답 Pydantic 모델.
- `services.py`: 품목 저장소(잠금, 수량 조회/조정), ItemRef 해석, 직접 재고 조정.
- `crud.py`: 품목 등록/조회/수정/삭제 (참조 중인 품목 삭제 거부).
- `routers.py`: 'inv' 엔드포인트 정의.
- `tasks.py`: 재고 원장 감사(audit) ARQ 태스크.
"""

__title__ = "RSMS Inventory Domain"
__description__ = "Owns item stock quantities and the stock mutation primitive."
__version__ = "0.1.0"
__all__ = []
