#supergains/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from supergains.api.deps import get_current_user
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.data.models.user import UserModel
from supergains.domain.schemas import CartOut, ItemIn, ItemQuantityIn
from supergains.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    return get_service(db).get_cart(user.id)


@router.post("/items", response_model=CartOut)
def add_item(
    payload: ItemIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).add_product(user.id, payload.product_id, payload.quantity)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.put("/items/{product_id}", response_model=CartOut)
def update_item(
    product_id: int,
    payload: ItemQuantityIn,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).update_quantity(user.id, product_id, payload.quantity)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return get_service(db).remove_product(user.id, product_id)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.delete("/", response_model=CartOut)
def clear_cart(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return get_service(db).clear_cart(user.id)
    except SERVICE_ERRORS as e:
        raise to_http(e)
