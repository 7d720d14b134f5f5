# supergains/api/routers/orders.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from supergains.api.deps import get_current_user, get_lock_service, rate_limit, require_admin
from supergains.api.errors import SERVICE_ERRORS, to_http
from supergains.data.database import get_db
from supergains.data.models.user import UserModel
from supergains.domain.schemas import (
    OrderCreate,
    OrderOut,
    OrderPage,
    OrderStatus,
    OrderStatusIn,
    PaymentStatus,
    PaymentStatusIn,
)
from supergains.services.lock_service import LockService
from supergains.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session, lock_service: LockService):
    return OrderService(db, lock_service)


@router.post("/", response_model=OrderOut, status_code=201, dependencies=[Depends(rate_limit("order_create"))])
def create_order(
    payload: OrderCreate,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """
    Places an order from the current user's cart.
    Notification and webhook are sent asynchronously.
    """
    svc = get_service(db, lock_service)
    try:
        return svc.create_order_from_cart(user.id, payload)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.get("/", response_model=OrderPage)
def list_orders(
    status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    """Own orders, or every order for admins."""
    return get_service(db, lock_service).list_orders(
        user, status=status, payment_status=payment_status, page=page, limit=limit
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return get_service(db, lock_service).get_order(order_id, user)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.patch("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return get_service(db, lock_service).cancel_order(order_id, user)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.patch("/{order_id}/status", response_model=OrderOut, dependencies=[Depends(rate_limit("admin"))])
def update_order_status(
    order_id: int,
    payload: OrderStatusIn,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return get_service(db, lock_service).update_status(order_id, payload.status, admin, payload.notes)
    except SERVICE_ERRORS as e:
        raise to_http(e)


@router.patch("/{order_id}/payment", response_model=OrderOut, dependencies=[Depends(rate_limit("admin"))])
def update_payment_status(
    order_id: int,
    payload: PaymentStatusIn,
    admin: UserModel = Depends(require_admin),
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
):
    try:
        return get_service(db, lock_service).update_payment_status(order_id, payload.payment_status)
    except SERVICE_ERRORS as e:
        raise to_http(e)
