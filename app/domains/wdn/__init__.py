# app/domains/wdn/__init__.py

"""
FastAPI 애플리케이션의 'wdn' 도메인 패키지입니다.

손실, 도난, 불량 등 사유가 있는 재고 차감(write-down) 기록을 관리합니다.
기록 생성은 재고 차감과, 기록 삭제는 재고 복원과 하나의 트랜잭션으로 묶입니다.

주요 서브모듈:
- `models.py`: 'wdn' 스키마의 테이블 및 사유 코드(WriteDownReason) 정의.
- `schemas.py`: 요청/응답, 통계 및 보고서 Pydantic 모델.
- `crud.py`: 생성/수정/삭제(복원), 목록, 통계, 보고서 로직.
- `routers.py`: 'wdn' 엔드포인트 정의.
"""

__title__ = "RSMS Write-Down Domain"
__description__ = "Records stock removals with a reason code, reversible by deletion."
__version__ = "0.1.0"
__all__ = []
