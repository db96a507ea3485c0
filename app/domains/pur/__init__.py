# app/domains/pur/__init__.py

"""
FastAPI 애플리케이션의 'pur' 도메인 패키지입니다.

구매(입고 전표)와 구매 품목을 관리합니다. 구매는 확정(finalize) 전까지 재고에 영향을 주지 않으며,
확정 시 모든 구매 품목 수량이 하나의 트랜잭션으로 재고에 반영됩니다 (한 번만, 전부 또는 전무).

주요 서브모듈:
- `models.py`: 'pur' 스키마의 테이블 및 결제 수단(PaymentMethod) 정의.
- `schemas.py`: 요청/응답, 통계 및 보고서 Pydantic 모델.
- `crud.py`: 구매 생성/수정/삭제, 품목 추가/수정/제거, 확정, 통계, 보고서 로직.
- `routers.py`: 'pur' 엔드포인트 정의.
"""

__title__ = "RSMS Purchase Domain"
__description__ = "Stages inbound stock as purchases and applies them on finalization."
__version__ = "0.1.0"
__all__ = []
