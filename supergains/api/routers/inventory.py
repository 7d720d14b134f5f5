# supergains/api/routers/inventory.py
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supergains.api.deps import rate_limit, require_admin, require_stock_access
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.domain.schemas import (
    InventoryOut,
    InventoryPage,
    InventoryStats,
    InventoryStatus,
    InventoryUpdate,
    StockQuantityIn,
)
from supergains.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])

admin_only = [Depends(rate_limit("admin")), Depends(require_admin)]
stock_access = [Depends(rate_limit("admin")), Depends(require_stock_access)]


def get_service(db: Session):
    return InventoryService(db)


@router.get("/product/{product_id}", response_model=InventoryOut)
def get_by_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).get_by_product(product_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.get("/", response_model=InventoryPage, dependencies=admin_only)
def list_inventory(
    status: Optional[InventoryStatus] = None,
    stock_min: Optional[int] = Query(None, ge=0),
    stock_max: Optional[int] = Query(None, ge=0),
    needs_restock: bool = False,
    sort_by: Literal["created_at", "updated_at", "current_stock", "total_sold"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return get_service(db).list_inventory(
        status=status,
        stock_min=stock_min,
        stock_max=stock_max,
        needs_restock=needs_restock,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )


@router.get("/stats", response_model=InventoryStats, dependencies=admin_only)
def inventory_stats(db: Session = Depends(get_db)):
    return get_service(db).stats()


@router.get("/low-stock", response_model=List[InventoryOut], dependencies=admin_only)
def low_stock(db: Session = Depends(get_db)):
    return get_service(db).low_stock()


@router.get("/out-of-stock", response_model=List[InventoryOut], dependencies=admin_only)
def out_of_stock(db: Session = Depends(get_db)):
    return get_service(db).out_of_stock()


@router.get("/{inventory_id}", response_model=InventoryOut, dependencies=admin_only)
def get_inventory(inventory_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).get(inventory_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.put("/{inventory_id}", response_model=InventoryOut, dependencies=admin_only)
def update_inventory(inventory_id: int, payload: InventoryUpdate, db: Session = Depends(get_db)):
    try:
        return get_service(db).update(inventory_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.delete("/{inventory_id}", response_model=InventoryOut, dependencies=admin_only)
def discontinue_inventory(inventory_id: int, db: Session = Depends(get_db)):
    try:
        return get_service(db).discontinue(inventory_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)


# =====================================================
# stock operations (admin or moderator)
# =====================================================
@router.post("/{inventory_id}/restock", response_model=InventoryOut, dependencies=stock_access)
def restock(inventory_id: int, payload: StockQuantityIn, db: Session = Depends(get_db)):
    try:
        return get_service(db).restock(inventory_id, payload.quantity, payload.notes)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.post("/{inventory_id}/reserve", response_model=InventoryOut, dependencies=stock_access)
def reserve(inventory_id: int, payload: StockQuantityIn, db: Session = Depends(get_db)):
    try:
        return get_service(db).reserve(inventory_id, payload.quantity)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.post("/{inventory_id}/release", response_model=InventoryOut, dependencies=stock_access)
def release(inventory_id: int, payload: StockQuantityIn, db: Session = Depends(get_db)):
    try:
        return get_service(db).release(inventory_id, payload.quantity)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.post("/{inventory_id}/sell", response_model=InventoryOut, dependencies=stock_access)
def sell(inventory_id: int, payload: StockQuantityIn, db: Session = Depends(get_db)):
    try:
        return get_service(db).sell(inventory_id, payload.quantity)
    except SERVICE_ERRORS as e:
        raise to_http(e)
