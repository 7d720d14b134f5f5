# supergains/services/cart_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from supergains.data.models.cart import CartModel
from supergains.data.models.cart_item import CartItemModel
from supergains.domain.errors import ConflictError, NotFoundError
from supergains.repos.cart_repo import CartRepo
from supergains.repos.product_repo import ProductRepo
from supergains.services.inventory_service import InventoryService
from supergains.utils.logging import get_logger
from supergains.utils.settings import MAX_ITEM_QUANTITY

logger = get_logger(__name__)


class CartService:
    """
    Use cases for the cart domain, split CQRS style:
    commands (add, update, remove, clear) change state and bump the cart version,
    the query (get) only reads.
    Every command recomputes total = sum(price * quantity) before committing.
    """

    def __init__(self, db: Session, inventory_service: InventoryService | None = None):
        self.repo = CartRepo(db)
        self.product_repo = ProductRepo(db)
        self.inventory_service = inventory_service or InventoryService(db)

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return {"items": [], "total": Decimal("0.00"), "item_count": 0}

        items = self.repo.get_cart_items(cart.id)
        return {
            "items": [
                {
                    "product_id": i.product_id,
                    "name": i.product.name if i.product else None,
                    "quantity": i.quantity,
                    "price": i.price,
                    "subtotal": i.price * i.quantity,
                }
                for i in items
            ],
            "total": self._total(items),
            "item_count": sum(i.quantity for i in items),
        }

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        product = self.product_repo.get_product(product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product not found")

        cart = self.repo.get_cart_by_user(user_id)
        existing_item = self.repo.get_cart_item(cart.id, product_id) if cart else None
        new_quantity = quantity + (existing_item.quantity if existing_item else 0)

        if new_quantity > MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity per product cannot exceed {MAX_ITEM_QUANTITY}")

        #stock check on the whole line, nothing is written if it fails
        self.inventory_service.check_stock(product_id, new_quantity)

        if not cart:
            #cart created lazily on first add
            cart = self.repo.create_cart(CartModel(user_id=user_id, total=Decimal("0.00"), version=1))
            logger.info(f"Created cart {cart.id} for user {user_id}")

        price = Decimal(str(product.price))
        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {new_quantity}"
            )
            existing_item.quantity = new_quantity
            existing_item.price = price
        else:
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity, price=price)
            )

        self._commit_new_version(cart)
        logger.info(f"Product {product_id} x{quantity} added to cart {cart.id}")
        return self.get_cart(user_id)

    def update_quantity(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")
        if quantity > MAX_ITEM_QUANTITY:
            raise ValueError(f"Quantity per product cannot exceed {MAX_ITEM_QUANTITY}")

        cart = self._require_cart(user_id)
        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError("Product is not in the cart")

        if quantity == 0:
            return self.remove_product(user_id, product_id)

        self.inventory_service.check_stock(product_id, quantity)
        item.quantity = quantity

        self._commit_new_version(cart)
        logger.info(f"Cart {cart.id}: product {product_id} quantity set to {quantity}")
        return self.get_cart(user_id)

    def remove_product(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._require_cart(user_id)

        if self.repo.delete_cart_item(cart.id, product_id) == 0:
            raise NotFoundError("Product is not in the cart")

        self._commit_new_version(cart)
        logger.info(f"Product {product_id} removed from cart {cart.id}")
        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._require_cart(user_id)

        self.repo.delete_all_items(cart.id)
        self._commit_new_version(cart)
        logger.info(f"Cart {cart.id} cleared")
        return self.get_cart(user_id)

    # =====================================================
    # helpers
    # =====================================================
    def _require_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    @staticmethod
    def _total(items) -> Decimal:
        return sum((i.price * i.quantity for i in items), Decimal("0.00"))

    def _commit_new_version(self, cart: CartModel) -> None:
        """
        Optimistic locking on the version column:
        UPDATE carts SET version = 2, total = ... WHERE id = 1 AND version = 1
        """
        total = self._total(self.repo.get_cart_items(cart.id))
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=cart.version,
            new_data={
                "version": cart.version + 1,
                "total": total,
                "updated_at": datetime.now(timezone.utc),
            },
        )
        if rowcount == 0:
            self.repo.rollback()
            raise ConflictError("Cart was modified by another request, please retry")

        self.repo.commit()
