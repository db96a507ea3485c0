# app/core/exceptions.py

"""
재고 원장(stock ledger)의 실패 유형을 정의하는 모듈입니다.

서비스/CRUD 계층은 HTTPException 대신 아래의 타입이 지정된 예외만 발생시키며,
HTTP 상태 코드로의 변환은 `register_exception_handlers()`가 등록하는
단일 핸들러가 담당합니다.
"""

import logging
from enum import Enum
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """클라이언트가 분기할 수 있는 기계 판독용 오류 코드"""
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"


class StockLedgerError(Exception):
    """모든 재고 원장 예외의 기반 클래스"""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT

    def __init__(self, detail: str, **extra: Any):
        super().__init__(detail)
        self.detail = detail
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "code": self.code.value, **self.extra}


class NotFoundError(StockLedgerError):
    """참조한 품목/구매/구매 품목/재고 차감 기록이 존재하지 않음"""
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, key: Any):
        super().__init__(f"{entity} not found: {key}", entity=entity)


class InsufficientStockError(StockLedgerError):
    """요청한 변경이 재고 수량을 음수로 만드는 경우"""
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.INSUFFICIENT_STOCK

    def __init__(self, item_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}",
            item_id=item_id,
            available=available,
            requested=requested,
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested


class InvalidArgumentError(StockLedgerError):
    """양수가 아닌 수량, 누락되었거나 해석할 수 없는 기간 등"""
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.INVALID_ARGUMENT


class InvalidStateError(StockLedgerError):
    """확정(finalized)된 구매를 변경하려는 경우"""
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.INVALID_STATE


class ConflictError(StockLedgerError):
    """이름으로 품목을 찾을 때 후보가 여러 개이거나, 참조 중인 행을 삭제하려는 경우"""
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.CONFLICT


async def stock_ledger_exception_handler(request: Request, exc: StockLedgerError) -> JSONResponse:
    """StockLedgerError를 `{detail, code, ...}` JSON 응답으로 변환합니다."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log("%s %s -> %s (%s)", request.method, request.url.path, exc.code.value, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """애플리케이션에 재고 원장 예외 핸들러를 등록합니다."""
    app.add_exception_handler(StockLedgerError, stock_ledger_exception_handler)
