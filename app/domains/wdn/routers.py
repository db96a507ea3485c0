# app/domains/wdn/routers.py

from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.core.periods import StatsPeriod
from app.domains.usr.models import User as UsrUser
from app.domains.wdn import crud as wdn_crud, models as wdn_models, schemas as wdn_schemas

router = APIRouter(
    tags=["Write-Down Management (재고 차감 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 참조 데이터 / 집계 엔드포인트
# =============================================================================
@router.get("/reasons", response_model=List[str])
async def read_write_down_reasons():
    """차감 사유 코드 목록을 반환합니다."""
    return [reason.value for reason in wdn_models.WriteDownReason]


@router.get("/statistics", response_model=wdn_schemas.WriteDownStatistics)
async def read_write_down_statistics(
    period: StatsPeriod = Query(StatsPeriod.MONTH, description="today | week | month | year"),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """기간별 차감 건수/수량과 사유별 집계를 조회합니다."""
    return await wdn_crud.write_down.statistics(db, period=period)


@router.get("/report", response_model=wdn_schemas.WriteDownReport)
async def read_write_down_report(
    date_from: Optional[str] = Query(None, alias="dateFrom", description="YYYY-MM-DD (필수)"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="YYYY-MM-DD (필수)"),
    reason: Optional[wdn_models.WriteDownReason] = None,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """
    기간 보고서를 생성합니다.
    dateFrom/dateTo가 없거나 해석할 수 없거나 dateFrom > dateTo 이면 400 (INVALID_ARGUMENT).
    """
    return await wdn_crud.write_down.report(db, date_from=date_from, date_to=date_to, reason=reason)


# =============================================================================
# 2. wdn.write_downs 엔드포인트
# =============================================================================
@router.post(
    "/write-downs",
    response_model=wdn_schemas.WriteDownResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_write_down(
    write_down_in: wdn_schemas.WriteDownCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재고 차감 기록을 생성하고 품목 재고를 차감합니다."""
    return await wdn_crud.write_down.create(db, obj_in=write_down_in)


@router.get("/write-downs", response_model=wdn_schemas.WriteDownPage)
async def read_write_downs(
    reason: Optional[wdn_models.WriteDownReason] = None,
    item_id: Optional[int] = None,
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    paging: Dict[str, int] = Depends(deps.page_params),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재고 차감 기록 목록을 최신순으로 조회합니다."""
    return await wdn_crud.write_down.list_page(
        db, **paging, reason=reason, item_id=item_id, date_from=date_from, date_to=date_to
    )


@router.get("/write-downs/{write_down_id}", response_model=wdn_schemas.WriteDownResponse)
async def read_write_down(
    write_down_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await wdn_crud.write_down.get_with_item(db, write_down_id)


@router.put("/write-downs/{write_down_id}", response_model=wdn_schemas.WriteDownResponse)
async def update_write_down(
    write_down_id: int,
    write_down_update: wdn_schemas.WriteDownUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """사유/메모만 수정합니다. 재고에는 영향이 없습니다."""
    db_write_down = await wdn_crud.write_down.get_with_item(db, write_down_id)
    return await wdn_crud.write_down.update(db, db_obj=db_write_down, obj_in=write_down_update)


@router.delete("/write-downs/{write_down_id}", response_model=wdn_schemas.WriteDownDeleteResponse)
async def delete_write_down(
    write_down_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재고 차감 기록을 삭제하고 차감 수량을 재고에 되돌립니다."""
    return await wdn_crud.write_down.remove(db, id=write_down_id)
