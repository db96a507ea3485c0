# app/domains/pur/routers.py

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.core.periods import StatsPeriod
from app.domains.usr.models import User as UsrUser
from app.domains.pur import crud as pur_crud, schemas as pur_schemas

router = APIRouter(
    tags=["Purchase Management (구매 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 집계 엔드포인트
# =============================================================================
@router.get("/statistics", response_model=pur_schemas.PurchaseStatistics)
async def read_purchase_statistics(
    period: Optional[StatsPeriod] = Query(None, description="today | week | month | year"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """구매 건수, 지불 총액/평균, 구매 수량 합계를 조회합니다. period가 있으면 기간 필터보다 우선합니다."""
    return await pur_crud.purchase.statistics(db, period=period, date_from=date_from, date_to=date_to)


@router.get("/report", response_model=pur_schemas.PurchaseReport)
async def read_purchase_report(
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD (필수)"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD (필수)"),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await pur_crud.purchase.report(db, date_from=date_from, date_to=date_to)


# =============================================================================
# 2. pur.purchases 엔드포인트
# =============================================================================
@router.post(
    "/purchases",
    response_model=pur_schemas.PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_purchase(
    purchase_in: pur_schemas.PurchaseCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """구매와 구매 품목을 등록합니다. 재고는 확정(finalize) 시점에 반영됩니다."""
    return await pur_crud.purchase.create(db, obj_in=purchase_in)


@router.get("/purchases", response_model=pur_schemas.PurchasePage)
async def read_purchases(
    supplier: Optional[str] = None,
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    amount_min: Optional[Decimal] = Query(None, alias="amountMin", ge=0),
    amount_max: Optional[Decimal] = Query(None, alias="amountMax", ge=0),
    finalized: Optional[bool] = None,
    paging: Dict[str, int] = Depends(deps.page_params),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await pur_crud.purchase.list_page(
        db,
        **paging,
        supplier=supplier,
        date_from=date_from,
        date_to=date_to,
        amount_min=amount_min,
        amount_max=amount_max,
        finalized=finalized,
    )


@router.get("/purchases/{purchase_id}", response_model=pur_schemas.PurchaseResponse)
async def read_purchase(
    purchase_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await pur_crud.purchase.get_with_items(db, purchase_id)


@router.put("/purchases/{purchase_id}", response_model=pur_schemas.PurchaseResponse)
async def update_purchase(
    purchase_id: int,
    purchase_update: pur_schemas.PurchaseUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """구매 헤더를 수정합니다. 확정된 구매는 409 (INVALID_STATE)."""
    return await pur_crud.purchase.update_header(db, id=purchase_id, obj_in=purchase_update)


@router.delete("/purchases/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_purchase(
    purchase_id: int,
    db: Session = Depends(deps.get_db_session),
    current_admin: UsrUser = Depends(deps.get_current_admin_user),
):
    """구매를 삭제합니다 (관리자 전용). 확정된 구매여도 재고는 되돌리지 않습니다."""
    await pur_crud.purchase.remove(db, id=purchase_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/purchases/{purchase_id}/finalize", response_model=pur_schemas.PurchaseFinalizeResponse)
async def finalize_purchase(
    purchase_id: int,
    finalize_in: Optional[pur_schemas.PurchaseFinalize] = Body(None),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """구매를 확정하고 구매 수량을 재고에 더합니다. 이미 확정된 구매는 409 (INVALID_STATE)."""
    notes = finalize_in.notes if finalize_in else None
    return await pur_crud.purchase.finalize(db, id=purchase_id, notes=notes)


# =============================================================================
# 3. pur.purchase_items 엔드포인트
# =============================================================================
@router.get("/purchases/{purchase_id}/items", response_model=List[pur_schemas.PurchaseItemResponse])
async def read_purchase_items(
    purchase_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await pur_crud.purchase_item.list_for_purchase(db, purchase_id=purchase_id)


@router.post(
    "/purchases/{purchase_id}/items",
    response_model=pur_schemas.PurchaseItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_purchase_item(
    purchase_id: int,
    line_in: pur_schemas.PurchaseLineIn,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """품목을 추가합니다. 같은 품목이 이미 있으면 수량을 더하고 단가를 갱신합니다."""
    return await pur_crud.purchase.add_item(db, purchase_id=purchase_id, line_in=line_in)


@router.put("/purchase-items/{line_id}", response_model=pur_schemas.PurchaseItemResponse)
async def update_purchase_item(
    line_id: int,
    line_update: pur_schemas.PurchaseItemUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await pur_crud.purchase.update_item(db, line_id=line_id, obj_in=line_update)


@router.delete("/purchase-items/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_purchase_item(
    line_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    await pur_crud.purchase.remove_item(db, line_id=line_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
