# tests/test_unit.py

"""
데이터베이스 없이 실행되는 순수 함수 단위 테스트 모듈입니다.

- 통계 기간 계산 / 보고서 기간 검증
- 이름 검색 후보 선택 규칙
- 예외의 응답 본문과 상태 코드
- 페이지 계산
"""

from datetime import datetime, UTC
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.core.config import settings
from app.core.crud_base import page_window, pagination_meta
from app.core.exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
)
from app.core.periods import StatsPeriod, parse_report_range, period_start, shift_months
from app.domains.inv.services import pick_single_match, require_positive_quantity
from app.domains.pur import schemas as pur_schemas

NOW = datetime(2024, 3, 31, 15, 30, tzinfo=UTC)


# =============================================================================
# 1. 기간 계산
# =============================================================================
def test_period_start_today_is_midnight():
    assert period_start(StatsPeriod.TODAY, NOW) == datetime(2024, 3, 31, tzinfo=UTC)


def test_period_start_week_is_seven_days_back():
    assert period_start(StatsPeriod.WEEK, NOW) == datetime(2024, 3, 24, 15, 30, tzinfo=UTC)


def test_period_start_month_clamps_to_month_end():
    # 2024-03-31 의 한 달 전은 2024-02-29 (윤년 말일)
    assert period_start(StatsPeriod.MONTH, NOW) == datetime(2024, 2, 29, 15, 30, tzinfo=UTC)


def test_period_start_year():
    assert period_start(StatsPeriod.YEAR, NOW) == datetime(2023, 3, 31, 15, 30, tzinfo=UTC)


def test_shift_months_across_year_boundary():
    assert shift_months(datetime(2024, 1, 15, tzinfo=UTC), 2) == datetime(2023, 11, 15, tzinfo=UTC)


def test_parse_report_range_expands_bare_dates():
    start, end = parse_report_range("2024-03-01", "2024-03-31")
    assert start == datetime(2024, 3, 1, tzinfo=UTC)
    assert end.date().isoformat() == "2024-03-31"
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_parse_report_range_accepts_datetimes():
    start, end = parse_report_range("2024-03-01T08:00:00+00:00", "2024-03-01T18:00:00")
    assert start.hour == 8
    assert end.tzinfo is not None


@pytest.mark.parametrize(
    "date_from, date_to",
    [
        (None, "2024-03-31"),
        ("2024-03-01", None),
        ("", "2024-03-31"),
        ("ontem", "2024-03-31"),
        ("2024-02-30", "2024-03-31"),
        ("2024-04-01", "2024-03-31"),
    ],
)
def test_parse_report_range_rejects_invalid_input(date_from, date_to):
    with pytest.raises(InvalidArgumentError):
        parse_report_range(date_from, date_to)


# =============================================================================
# 2. 이름 검색 후보 선택
# =============================================================================
def _items(*ids):
    return [SimpleNamespace(id=item_id) for item_id in ids]


def test_pick_single_match_prefers_exact_candidates():
    assert pick_single_match("shirt", _items(1), _items(2, 3)).id == 1


def test_pick_single_match_uses_single_partial_candidate():
    assert pick_single_match("shirt", [], _items(7)).id == 7


def test_pick_single_match_without_candidates():
    with pytest.raises(NotFoundError):
        pick_single_match("shirt", [], [])


def test_pick_single_match_with_several_candidates():
    with pytest.raises(ConflictError) as exc_info:
        pick_single_match("shirt", [], _items(4, 5))
    assert exc_info.value.extra["candidates"] == [4, 5]


@pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
def test_require_positive_quantity_rejects(quantity):
    with pytest.raises(InvalidArgumentError):
        require_positive_quantity(quantity)


def test_require_positive_quantity_accepts():
    assert require_positive_quantity(3) == 3


# =============================================================================
# 3. 예외 응답 본문
# =============================================================================
def test_insufficient_stock_error_body():
    error = InsufficientStockError(5, available=10, requested=50)
    assert error.status_code == 409
    assert error.to_dict() == {
        "detail": "Insufficient stock. Available: 10, Requested: 50",
        "code": "INSUFFICIENT_STOCK",
        "item_id": 5,
        "available": 10,
        "requested": 50,
    }


def test_error_status_codes():
    assert NotFoundError("Item", 1).status_code == 404
    assert NotFoundError("Item", 1).to_dict()["code"] == "NOT_FOUND"
    assert InvalidArgumentError("bad").status_code == 400
    assert InvalidStateError("finalized").status_code == 409
    assert ConflictError("ambiguous").status_code == 409


# =============================================================================
# 4. 페이지 계산 / 응답 계산 필드
# =============================================================================
def test_page_window_clamps_limit():
    assert page_window(0, 5) == (1, 5, 0)
    assert page_window(3, 10) == (3, 10, 20)
    assert page_window(1, 10_000)[1] == settings.MAX_PAGE_SIZE


def test_pagination_meta():
    assert pagination_meta(2, 10, 25) == {
        "page": 2, "limit": 10, "total": 25, "total_pages": 3, "has_next": True, "has_prev": True,
    }
    assert pagination_meta(1, 10, 0)["total_pages"] == 0


def test_purchase_response_computed_totals():
    now = datetime(2024, 3, 10, tzinfo=UTC)
    response = pur_schemas.PurchaseResponse(
        id=1,
        supplier="Fornecedor",
        purchase_date=now.date(),
        amount_paid=Decimal("50.00"),
        finalized=False,
        created_at=now,
        updated_at=now,
        items=[
            pur_schemas.PurchaseItemResponse(id=1, purchase_id=1, item_id=1, quantity=2, unit_cost=Decimal("10.00")),
            pur_schemas.PurchaseItemResponse(id=2, purchase_id=1, item_id=2, quantity=3, unit_cost=Decimal("5.50")),
        ],
    )
    assert response.total_quantity == 5
    assert response.items_value == Decimal("36.50")
