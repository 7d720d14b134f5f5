# supergains/services/inventory_service.py
import math

from sqlalchemy.orm import Session

from supergains.data.models.inventory import InventoryModel
from supergains.domain.errors import InsufficientStockError, NotFoundError
from supergains.repos.inventory_repo import InventoryRepo
from supergains.services.notification_service import NotificationService
from supergains.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """
    Stock tracking per product.
    -check_stock: read-only availability check (no side effects)
    -restock / reserve / release / sell: single conditional UPDATEs, so a
     concurrent writer can never push available stock below zero
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = InventoryRepo(db)
        self.notification_service = notification_service or NotificationService()

    #query
    def check_stock(self, product_id: int, quantity: int) -> InventoryModel:
        """
        Use Case: availability check.
        Returns the inventory record when `quantity` can be sold, raises
        InsufficientStockError with the shortfall otherwise.
        """
        if quantity <= 0:
            raise ValueError("Quantity must be greater than 0")

        inventory = self.repo.get_by_product(product_id)
        if not inventory:
            raise NotFoundError(f"No inventory found for product {product_id}")

        name = inventory.product.name if inventory.product else None

        if not inventory.is_sellable:
            logger.info(f"Product {product_id} is {inventory.status}, rejecting {quantity} units")
            raise InsufficientStockError.for_product(product_id, quantity, 0, name)

        if inventory.available_stock < quantity:
            logger.info(
                f"Insufficient stock for product {product_id}: "
                f"available {inventory.available_stock}, requested {quantity}"
            )
            raise InsufficientStockError.for_product(product_id, quantity, inventory.available_stock, name)

        return inventory

    def get(self, inventory_id: int) -> InventoryModel:
        inventory = self.repo.get(inventory_id)
        if not inventory:
            raise NotFoundError("Inventory record not found")
        return inventory

    def get_by_product(self, product_id: int) -> InventoryModel:
        inventory = self.repo.get_by_product(product_id)
        if not inventory:
            raise NotFoundError(f"No inventory found for product {product_id}")
        return inventory

    def list_inventory(
        self,
        status: str | None = None,
        stock_min: int | None = None,
        stock_max: int | None = None,
        needs_restock: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 50,
    ) -> dict:
        limit = min(100, max(1, limit))
        page = max(1, page)

        items, total = self.repo.list_filtered(
            status=status,
            stock_min=stock_min,
            stock_max=stock_max,
            needs_restock=needs_restock,
            sort_by=sort_by,
            sort_order=sort_order,
            offset=(page - 1) * limit,
            limit=limit,
        )
        pages = math.ceil(total / limit) if total else 0
        return {
            "items": items,
            "total": total,
            "page": page,
            "pages": pages,
            "limit": limit,
            "has_next": page < pages,
            "has_prev": page > 1,
        }

    def low_stock(self) -> list[InventoryModel]:
        return self.repo.list_low_stock()

    def out_of_stock(self) -> list[InventoryModel]:
        return self.repo.list_out_of_stock()

    def stats(self) -> dict:
        return self.repo.stats()

    #commands
    def update(self, inventory_id: int, data: dict) -> InventoryModel:
        inventory = self.get(inventory_id)

        min_stock = data.get("min_stock", inventory.min_stock)
        max_stock = data.get("max_stock", inventory.max_stock)
        if max_stock < min_stock:
            raise ValueError("max_stock must be greater than or equal to min_stock")

        for field, value in data.items():
            setattr(inventory, field, value)
        inventory.refresh_status()

        self.repo.commit()
        logger.info(f"Inventory {inventory_id} updated: {sorted(data)}")
        return self.get(inventory_id)

    def discontinue(self, inventory_id: int) -> InventoryModel:
        """Inventory is never hard-deleted, only marked discontinued."""
        inventory = self.get(inventory_id)
        inventory.status = "discontinued"
        self.repo.commit()
        logger.info(f"Inventory {inventory_id} (product {inventory.product_id}) discontinued")
        return self.get(inventory_id)

    def restock(self, inventory_id: int, quantity: int, notes: str | None = None) -> InventoryModel:
        inventory = self.get(inventory_id)
        product_id = inventory.product_id
        product_name = inventory.product.name if inventory.product else None

        self.repo.restock(product_id, quantity)
        if notes:
            inventory.notes = notes
        self.repo.commit()

        updated = self.get(inventory_id)
        logger.info(f"Restocked product {product_id} with {quantity} units, now {updated.current_stock}")

        self.notification_service.publish_event(
            "inventory.restocked",
            {
                "product_id": product_id,
                "product_name": product_name,
                "quantity_restocked": quantity,
                "current_stock": updated.current_stock,
            },
        )
        return updated

    def reserve(self, inventory_id: int, quantity: int) -> InventoryModel:
        inventory = self.get(inventory_id)
        product_id = inventory.product_id
        available = inventory.available_stock if inventory.is_sellable else 0

        if not self.repo.reserve_if_available(product_id, quantity):
            self.repo.rollback()
            raise InsufficientStockError.for_product(product_id, quantity, available)
        self.repo.commit()
        logger.info(f"Reserved {quantity} units of product {product_id}")
        return self.get(inventory_id)

    def release(self, inventory_id: int, quantity: int) -> InventoryModel:
        inventory = self.get(inventory_id)
        self.repo.release(inventory.product_id, quantity)
        self.repo.commit()
        logger.info(f"Released {quantity} reserved units of product {inventory.product_id}")
        return self.get(inventory_id)

    def sell(self, inventory_id: int, quantity: int) -> InventoryModel:
        inventory = self.get(inventory_id)
        product_id = inventory.product_id
        available = inventory.available_stock if inventory.is_sellable else 0

        if not self.repo.decrement_if_available(product_id, quantity):
            self.repo.rollback()
            raise InsufficientStockError.for_product(product_id, quantity, available)
        self.repo.commit()
        logger.info(f"Sold {quantity} units of product {product_id}")
        return self.get(inventory_id)
