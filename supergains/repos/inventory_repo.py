# supergains/repos/inventory_repo.py
from datetime import datetime, timezone

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session, joinedload

from supergains.data.models.inventory import SELLABLE_STATUSES, InventoryModel
from supergains.data.models.product import ProductModel

SORT_COLUMNS = {
    "created_at": InventoryModel.created_at,
    "updated_at": InventoryModel.updated_at,
    "current_stock": InventoryModel.current_stock,
    "total_sold": InventoryModel.total_sold,
}


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, inventory_id: int) -> InventoryModel | None:
        return self.db.get(InventoryModel, inventory_id, options=[joinedload(InventoryModel.product)])

    def get_by_product(self, product_id: int) -> InventoryModel | None:
        return self.db.execute(
            select(InventoryModel)
            .options(joinedload(InventoryModel.product))
            .where(InventoryModel.product_id == product_id)
        ).scalar_one_or_none()

    def add(self, inventory: InventoryModel) -> InventoryModel:
        self.db.add(inventory)
        self.db.flush()
        return inventory

    def list_filtered(
        self,
        status: str | None = None,
        stock_min: int | None = None,
        stock_max: int | None = None,
        needs_restock: bool = False,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[InventoryModel], int]:
        conditions = []
        if status:
            conditions.append(InventoryModel.status == status)
        if stock_min is not None:
            conditions.append(InventoryModel.current_stock >= stock_min)
        if stock_max is not None:
            conditions.append(InventoryModel.current_stock <= stock_max)
        if needs_restock:
            conditions.append(InventoryModel.current_stock <= InventoryModel.min_stock)

        column = SORT_COLUMNS.get(sort_by, InventoryModel.created_at)
        ordering = column.asc() if sort_order == "asc" else column.desc()

        total = self.db.execute(
            select(func.count(InventoryModel.id)).where(*conditions)
        ).scalar_one()

        rows = self.db.execute(
            select(InventoryModel)
            .options(joinedload(InventoryModel.product))
            .where(*conditions)
            .order_by(ordering, InventoryModel.id)
            .offset(offset)
            .limit(limit)
        ).scalars()

        return list(rows), total

    def list_low_stock(self) -> list[InventoryModel]:
        return list(
            self.db.execute(
                select(InventoryModel)
                .options(joinedload(InventoryModel.product))
                .where(
                    InventoryModel.current_stock <= InventoryModel.min_stock,
                    InventoryModel.status.in_(SELLABLE_STATUSES),
                )
                .order_by(InventoryModel.current_stock, InventoryModel.id)
            ).scalars()
        )

    def list_out_of_stock(self) -> list[InventoryModel]:
        return list(
            self.db.execute(
                select(InventoryModel)
                .options(joinedload(InventoryModel.product))
                .where(
                    InventoryModel.available_stock <= 0,
                    InventoryModel.status.in_(SELLABLE_STATUSES),
                )
                .order_by(InventoryModel.id)
            ).scalars()
        )

    def stats(self) -> dict:
        row = self.db.execute(
            select(
                func.count(InventoryModel.id),
                func.coalesce(func.sum(InventoryModel.current_stock), 0),
                func.coalesce(func.sum(InventoryModel.reserved_stock), 0),
                func.coalesce(func.sum(InventoryModel.total_sold), 0),
                func.avg(InventoryModel.current_stock),
                func.coalesce(
                    func.sum(case((InventoryModel.current_stock <= InventoryModel.min_stock, 1), else_=0)), 0
                ),
                func.coalesce(func.sum(case((InventoryModel.current_stock == 0, 1), else_=0)), 0),
            )
        ).one()

        breakdown = dict(
            self.db.execute(
                select(InventoryModel.status, func.count(InventoryModel.id)).group_by(InventoryModel.status)
            ).all()
        )

        total_products, total_stock, total_reserved, total_sold, avg_stock, low, out = row
        return {
            "total_products": total_products,
            "total_stock": int(total_stock),
            "total_reserved": int(total_reserved),
            "total_available": int(total_stock) - int(total_reserved),
            "total_sold": int(total_sold),
            "average_stock": round(float(avg_stock), 2) if avg_stock is not None else 0.0,
            "status_breakdown": breakdown,
            "low_stock": int(low),
            "out_of_stock": int(out),
        }

    # =====================================================
    # atomic stock updates
    # =====================================================
    def decrement_if_available(self, product_id: int, quantity: int) -> bool:
        """
        Compare-and-swap on available stock:
        UPDATE inventory SET current_stock = current_stock - q
        WHERE product_id = p AND current_stock - reserved_stock >= q
        Zero rows means another checkout got there first.
        """
        now = datetime.now(timezone.utc)
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.status.in_(SELLABLE_STATUSES),
                InventoryModel.current_stock - InventoryModel.reserved_stock >= quantity,
            )
            .values(
                current_stock=InventoryModel.current_stock - quantity,
                total_sold=InventoryModel.total_sold + quantity,
                last_sold=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        self._sync_product_stock(product_id)
        self._refresh_status(product_id)
        return True

    def reserve_if_available(self, product_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.product_id == product_id,
                InventoryModel.status.in_(SELLABLE_STATUSES),
                InventoryModel.current_stock - InventoryModel.reserved_stock >= quantity,
            )
            .values(
                reserved_stock=InventoryModel.reserved_stock + quantity,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return False

        self._refresh_status(product_id)
        return True

    def release(self, product_id: int, quantity: int) -> None:
        self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(
                reserved_stock=case(
                    (InventoryModel.reserved_stock < quantity, 0),
                    else_=InventoryModel.reserved_stock - quantity,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        self._refresh_status(product_id)

    def restock(self, product_id: int, quantity: int) -> None:
        now = datetime.now(timezone.utc)
        self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(
                current_stock=InventoryModel.current_stock + quantity,
                last_restocked=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        self._sync_product_stock(product_id)
        self._refresh_status(product_id)

    def restore_sold(self, product_id: int, quantity: int) -> None:
        """Puts back stock taken by decrement_if_available (order cancellation)."""
        self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(
                current_stock=InventoryModel.current_stock + quantity,
                total_sold=case(
                    (InventoryModel.total_sold < quantity, 0),
                    else_=InventoryModel.total_sold - quantity,
                ),
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        self._sync_product_stock(product_id)
        self._refresh_status(product_id)

    def _sync_product_stock(self, product_id: int) -> None:
        current = (
            select(InventoryModel.current_stock)
            .where(InventoryModel.product_id == product_id)
            .scalar_subquery()
        )
        self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(stock=current)
            .execution_options(synchronize_session=False)
        )

    def _refresh_status(self, product_id: int) -> None:
        available = InventoryModel.current_stock - InventoryModel.reserved_stock
        self.db.execute(
            update(InventoryModel)
            .where(InventoryModel.product_id == product_id)
            .values(
                status=case(
                    ((InventoryModel.status == "active") & (available <= 0), "out_of_stock"),
                    ((InventoryModel.status == "out_of_stock") & (available > 0), "active"),
                    else_=InventoryModel.status,
                )
            )
            .execution_options(synchronize_session=False)
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
