# app/core/periods.py

"""
통계/보고서 조회에 쓰이는 기간 계산 유틸리티 모듈입니다.

- 통계 기간(today/week/month/year)을 시작 시각으로 변환합니다.
- 보고서의 필수 기간(dateFrom/dateTo) 문자열을 검증하고 하루 단위 경계로 변환합니다.
"""

import calendar
from datetime import date, datetime, time, timedelta, UTC
from enum import Enum
from typing import Optional, Tuple

from app.core.exceptions import InvalidArgumentError


class StatsPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def shift_months(moment: datetime, months: int) -> datetime:
    """moment에서 months 개월 이전 시각을 반환합니다. 말일은 대상 월의 말일로 맞춥니다."""
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: StatsPeriod, now: Optional[datetime] = None) -> datetime:
    """
    통계 기간의 시작 시각을 계산합니다.

    - today: 오늘 00:00
    - week: 현재로부터 7일 전
    - month: 현재로부터 1개월 전
    - year: 현재로부터 1년 전
    """
    now = now or datetime.now(UTC)
    if period == StatsPeriod.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period == StatsPeriod.MONTH:
        return shift_months(now, 1)
    return shift_months(now, 12)


def _parse_bound(value: Optional[str], field: str, *, end_of_day: bool) -> datetime:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"'{field}' is required", field=field)
    raw = str(value).strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end_of_day else time.min, tzinfo=UTC)
        moment = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidArgumentError(f"'{field}' is not a valid date: {raw}", field=field)
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def parse_report_range(date_from: Optional[str], date_to: Optional[str]) -> Tuple[datetime, datetime]:
    """
    보고서 기간을 검증하여 (시작, 끝) 시각을 반환합니다.

    날짜만 주어지면 시작일은 00:00, 종료일은 23:59:59.999999 로 확장됩니다.
    누락, 해석 불가, 또는 시작 > 종료이면 InvalidArgumentError를 발생시킵니다.
    """
    start = _parse_bound(date_from, "dateFrom", end_of_day=False)
    end = _parse_bound(date_to, "dateTo", end_of_day=True)
    if start > end:
        raise InvalidArgumentError("'dateFrom' must not be later than 'dateTo'", field="dateFrom")
    return start, end
