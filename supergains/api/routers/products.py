# supergains/api/routers/products.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supergains.api.deps import rate_limit, require_admin
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.data.models.user import UserModel
from supergains.domain.schemas import ProductCreate, ProductOut, ProductUpdate
from supergains.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=List[ProductOut])
def list_products(
    q: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = None,
    brand: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return ProductService(db).list_products(
        q=q,
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        return ProductService(db).get_product(product_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.post("/", response_model=ProductOut, status_code=201, dependencies=[Depends(rate_limit("admin"))])
def create_product(
    payload: ProductCreate,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return ProductService(db).create_product(payload)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(rate_limit("admin"))])
def update_product(
    product_id: int,
    payload: ProductUpdate,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        return ProductService(db).update_product(product_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.delete("/{product_id}", dependencies=[Depends(rate_limit("admin"))])
def delete_product(
    product_id: int,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        ProductService(db).delete_product(product_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)
    return {"success": True, "message": "Product discontinued"}
