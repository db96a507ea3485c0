# app/domains/inv/routers.py

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session

from app.core import dependencies as deps
from app.domains.usr.models import User as UsrUser
from app.domains.inv import crud as inv_crud, schemas as inv_schemas, services as inv_services

router = APIRouter(
    tags=["Inventory Management (품목 및 재고 관리)"],
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. inv.items 엔드포인트 (입고/품목 정보)
# =============================================================================
@router.post(
    "/items",
    response_model=inv_schemas.ItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_item(
    item_in: inv_schemas.ItemCreate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """새 품목을 등록합니다 (입고). 등록한 사용자가 소유자로 기록됩니다."""
    return await inv_crud.item.create_for_owner(db, obj_in=item_in, owner_id=current_user.id)


@router.get("/items", response_model=inv_schemas.ItemPage)
async def read_items(
    type: Optional[str] = None,
    color: Optional[str] = None,
    size: Optional[str] = None,
    paging: Dict[str, int] = Depends(deps.page_params),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.item.list_page(db, **paging, type=type, color=color, size=size)


# NOTE: '/items/{item_id}' 보다 먼저 선언해야 'search'가 경로 매개변수로 해석되지 않습니다.
@router.get("/items/search", response_model=List[inv_schemas.ItemResponse])
async def search_items(
    q: str = Query(..., min_length=1, description="품목명 검색어"),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.item.search_by_name(db, term=q, limit=limit)


@router.get("/items/{item_id}", response_model=inv_schemas.ItemResponse)
async def read_item(
    item_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    return await inv_crud.item.get_or_404(db, item_id)


@router.put("/items/{item_id}", response_model=inv_schemas.ItemResponse)
async def update_item(
    item_id: int,
    item_update: inv_schemas.ItemUpdate,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """품목 정보를 수정합니다. 재고 수량은 이 엔드포인트로 바꿀 수 없습니다."""
    db_item = await inv_crud.item.get_or_404(db, item_id)
    return await inv_crud.item.update(db, db_obj=db_item, obj_in=item_update)


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: Session = Depends(deps.get_db_session),
    current_admin: UsrUser = Depends(deps.get_current_admin_user),
):
    """품목을 삭제합니다 (관리자 전용). 구매/차감 기록이 참조 중이면 409."""
    await inv_crud.item.remove(db, id=item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# 2. 재고 수량 엔드포인트 (Item Store / Direct Adjustment)
# =============================================================================
@router.get("/items/{item_id}/quantity", response_model=inv_schemas.QuantityResponse)
async def read_item_quantity(
    item_id: int,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    quantity = await inv_services.get_quantity(db, item_id)
    return {"item_id": item_id, "quantity": quantity}


@router.post("/items/{item_id}/add-quantity", response_model=inv_schemas.AddQuantityResponse)
async def add_item_quantity(
    item_id: int,
    quantity_in: inv_schemas.QuantityRequest,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재고를 직접 늘립니다 (수동 입고)."""
    return await inv_services.add_quantity(db, item_id, quantity_in.quantity)


@router.post("/items/{item_id}/remove-quantity", response_model=inv_schemas.RemoveQuantityResponse)
async def remove_item_quantity(
    item_id: int,
    quantity_in: inv_schemas.QuantityRequest,
    db: Session = Depends(deps.get_db_session),
    current_user: UsrUser = Depends(deps.get_current_active_user),
):
    """재고를 직접 줄입니다. 재고가 부족하면 409 (INSUFFICIENT_STOCK)이며 수량은 변하지 않습니다."""
    return await inv_services.remove_quantity(db, item_id, quantity_in.quantity)
