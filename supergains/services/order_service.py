# supergains/services/order_service.py
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from supergains.data.models.order import OrderModel
from supergains.data.models.order_item import OrderItemModel
from supergains.data.models.user import UserModel
from supergains.domain.errors import ConflictError, InsufficientStockError, NotFoundError
from supergains.domain.schemas import OrderCreate
from supergains.repos.cart_repo import CartRepo
from supergains.repos.inventory_repo import InventoryRepo
from supergains.repos.order_repo import OrderRepo
from supergains.services.lock_service import LockService
from supergains.services.notification_service import NotificationService
from supergains.utils.logging import get_logger
from supergains.utils.settings import (
    CHECKOUT_LOCK_TTL_SECONDS,
    FREE_SHIPPING_THRESHOLD,
    SHIPPING_FEE,
    TAX_RATE,
)

logger = get_logger(__name__)

CANCELLABLE = ("pending", "processing")
FINAL = ("delivered", "cancelled")


def _money(value) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def compute_totals(subtotal: Decimal) -> dict:
    subtotal = _money(subtotal)
    tax = _money(subtotal * TAX_RATE)
    shipping = Decimal("0.00") if subtotal > FREE_SHIPPING_THRESHOLD else _money(SHIPPING_FEE)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "shipping": shipping,
        "total": subtotal + tax + shipping,
    }


class OrderService:
    """
    Order domain, separate from CartService.
    Checkout runs in a single database transaction: stock decrements, the order
    row and clearing the cart commit together or not at all.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.inventory_repo = InventoryRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    #commands
    def create_order_from_cart(self, user_id: int, payload: OrderCreate) -> OrderModel:
        """
        Use Case: place an order from the user's cart.

        1. cart must not be empty
        2. every line is checked against available stock (no writes on failure)
        3. each line is decremented with a conditional UPDATE
        4. order + items snapshot are persisted
        5. cart is cleared
        6. notification and webhook are queued after commit
        """
        token = self.lock_service.new_token()
        if not self.lock_service.acquire_checkout_lock(user_id, token, CHECKOUT_LOCK_TTL_SECONDS):
            raise ConflictError("A checkout is already in progress for this user")

        try:
            order = self._checkout(user_id, payload)
        finally:
            self.lock_service.release_checkout_lock(user_id, token)

        self.notification_service.send_order_notification(user_id, order.id, order.order_number)
        self.notification_service.publish_event(
            "order.created",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "user_id": user_id,
                "total": str(order.total),
                "items": [{"product_id": i.product_id, "quantity": i.quantity} for i in order.items],
            },
        )
        return order

    def _checkout(self, user_id: int, payload: OrderCreate) -> OrderModel:
        cart = self.cart_repo.get_cart_by_user(user_id)
        items = self.cart_repo.get_cart_items(cart.id) if cart else []
        if not items:
            raise ValueError("Cart is empty")

        #check all lines first so the client gets every shortfall at once
        shortfalls = []
        for item in items:
            inventory = self.inventory_repo.get_by_product(item.product_id)
            available = inventory.available_stock if inventory and inventory.is_sellable else 0
            if available < item.quantity:
                shortfalls.append(
                    {
                        "product_id": item.product_id,
                        "product": item.product.name if item.product else None,
                        "requested": item.quantity,
                        "available": available,
                        "shortfall": item.quantity - available,
                    }
                )
        if shortfalls:
            logger.info(f"Checkout for user {user_id} rejected, insufficient stock: {shortfalls}")
            raise InsufficientStockError(shortfalls, "Insufficient stock for some products")

        snapshot = [
            {
                "product_id": i.product_id,
                "product_name": i.product.name if i.product else f"Product {i.product_id}",
                "quantity": i.quantity,
                "price": _money(i.price),
            }
            for i in items
        ]
        cart_id, cart_version = cart.id, cart.version

        try:
            for line in snapshot:
                if not self.inventory_repo.decrement_if_available(line["product_id"], line["quantity"]):
                    #lost the race to a concurrent checkout, undo every line
                    raise InsufficientStockError.for_product(
                        line["product_id"], line["quantity"], 0, line["product_name"]
                    )

            totals = compute_totals(sum((line["price"] * line["quantity"] for line in snapshot), Decimal("0")))
            order = self.repo.add_order(
                OrderModel(
                    user_id=user_id,
                    status="pending",
                    payment_status="pending",
                    payment_method=payload.payment_method,
                    shipping_address=payload.shipping_address.model_dump(),
                    notes=payload.notes,
                    items=[
                        OrderItemModel(
                            product_id=line["product_id"],
                            product_name=line["product_name"],
                            quantity=line["quantity"],
                            price=line["price"],
                            subtotal=_money(line["price"] * line["quantity"]),
                        )
                        for line in snapshot
                    ],
                    **totals,
                )
            )
            order.order_number = f"ORD-{order.id:06d}"

            self.cart_repo.delete_all_items(cart_id)
            rowcount = self.cart_repo.update_cart_version(
                cart_id=cart_id,
                old_version=cart_version,
                new_data={"version": cart_version + 1, "total": Decimal("0.00")},
            )
            if rowcount == 0:
                raise ConflictError("Cart was modified during checkout, please retry")

            self.repo.commit()
        except InsufficientStockError as e:
            self.repo.rollback()
            #report what is left now that our partial decrements are undone
            for line in e.lines:
                inventory = self.inventory_repo.get_by_product(line["product_id"])
                line["available"] = inventory.available_stock if inventory else 0
                line["shortfall"] = line["requested"] - line["available"]
            logger.warning(f"Checkout for user {user_id} lost a stock race: {e.lines}")
            raise
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order.order_number} created for user {user_id}, total {order.total}")
        return self.repo.get_order(order.id)

    def cancel_order(self, order_id: int, user: UserModel) -> OrderModel:
        order = self.get_order(order_id, user)

        if order.status not in CANCELLABLE:
            raise ValueError("Only pending or processing orders can be cancelled")

        self._restore_stock(order)
        order.status = "cancelled"
        order.cancelled_at = datetime.now(timezone.utc)
        self.repo.commit()

        logger.info(f"Order {order.order_number} cancelled by user {user.id}")
        self._publish_cancelled(order)
        return self.repo.get_order(order_id)

    def update_status(self, order_id: int, status: str, admin: UserModel, notes: str | None = None) -> OrderModel:
        order = self._require(order_id)

        if order.status in FINAL and status != order.status:
            raise ValueError(f"Order is already {order.status}")

        now = datetime.now(timezone.utc)
        was_cancelled = order.status == "cancelled"

        if status == "processing" and not order.processed_at:
            order.processed_at = now
            order.processed_by = admin.id
        elif status == "shipped" and not order.shipped_at:
            order.shipped_at = now
        elif status == "delivered" and not order.delivered_at:
            order.delivered_at = now
        elif status == "cancelled" and not was_cancelled:
            self._restore_stock(order)
            order.cancelled_at = now

        order.status = status
        if notes:
            order.notes = notes
        self.repo.commit()

        logger.info(f"Order {order.order_number} status -> {status} by admin {admin.id}")
        if status == "cancelled" and not was_cancelled:
            self._publish_cancelled(order)
        return self.repo.get_order(order_id)

    def update_payment_status(self, order_id: int, payment_status: str) -> OrderModel:
        order = self._require(order_id)
        order.payment_status = payment_status
        self.repo.commit()
        logger.info(f"Order {order.order_number} payment status -> {payment_status}")
        return self.repo.get_order(order_id)

    #queries
    def get_order(self, order_id: int, user: UserModel) -> OrderModel:
        order = self._require(order_id)
        if user.role != "admin" and order.user_id != user.id:
            raise PermissionError("You do not have access to this order")
        return order

    def list_orders(
        self,
        user: UserModel,
        status: str | None = None,
        payment_status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        limit = min(100, max(1, limit))
        page = max(1, page)

        orders, total = self.repo.list_orders(
            user_id=None if user.role == "admin" else user.id,
            status=status,
            payment_status=payment_status,
            offset=(page - 1) * limit,
            limit=limit,
        )
        pages = math.ceil(total / limit) if total else 0
        return {
            "items": orders,
            "total": total,
            "page": page,
            "pages": pages,
            "limit": limit,
            "has_next": page < pages,
            "has_prev": page > 1,
        }

    # =====================================================
    # helpers
    # =====================================================
    def _require(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _restore_stock(self, order: OrderModel) -> None:
        for item in order.items:
            self.inventory_repo.restore_sold(item.product_id, item.quantity)

    def _publish_cancelled(self, order: OrderModel) -> None:
        self.notification_service.publish_event(
            "order.cancelled",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "user_id": order.user_id,
                "items": [{"product_id": i.product_id, "quantity": i.quantity} for i in order.items],
            },
        )
