# tests/domains/__init__.py

"""
도메인별 테스트 모듈 패키지입니다.

- `test_usr_n.py`: 로그인, 현재 사용자, 사용자 생성.
- `test_inv_n.py`: 품목 저장소, 직접 재고 조정, 동시 차감.
- `test_wdn_n.py`: 재고 차감 기록 생성/삭제(복원), 통계, 보고서.
- `test_pur_n.py`: 구매 품목 누적, 확정(한 번만, 전부 또는 전무), 통계, 보고서.
"""

__title__ = "RSMS Domain Tests"
__description__ = "Categorized tests for each business domain in RSMS FastAPI application."
__version__ = "0.1.0"
__all__ = []
