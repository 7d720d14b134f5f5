# supergains/repos/order_repo.py
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from supergains.data.models.order import OrderModel
from supergains.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id, options=[selectinload(OrderModel.items)])

    def list_orders(
        self,
        user_id: int | None = None,
        status: str | None = None,
        payment_status: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[OrderModel], int]:
        conditions = []
        if user_id is not None:
            conditions.append(OrderModel.user_id == user_id)
        if status:
            conditions.append(OrderModel.status == status)
        if payment_status:
            conditions.append(OrderModel.payment_status == payment_status)

        total = self.db.execute(select(func.count(OrderModel.id)).where(*conditions)).scalar_one()
        rows = self.db.execute(
            select(OrderModel)
            .options(selectinload(OrderModel.items))
            .where(*conditions)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return list(rows), total

    # =====================================================
    # reports (read only)
    # =====================================================
    def sales_stats(self) -> dict:
        count, revenue, average = self.db.execute(
            select(
                func.count(OrderModel.id),
                func.coalesce(func.sum(OrderModel.total), 0),
                func.avg(OrderModel.total),
            ).where(OrderModel.status != "cancelled")
        ).one()

        items_sold = self.db.execute(
            select(func.coalesce(func.sum(OrderItemModel.quantity), 0))
            .join(OrderModel, OrderModel.id == OrderItemModel.order_id)
            .where(OrderModel.status != "cancelled")
        ).scalar_one()

        by_status = dict(
            self.db.execute(select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)).all()
        )
        return {
            "total_orders": count,
            "total_revenue": revenue,
            "average_order_value": average or 0,
            "items_sold": int(items_sold),
            "orders_by_status": by_status,
        }

    def top_products(self, limit: int = 5) -> list[dict]:
        quantity = func.sum(OrderItemModel.quantity).label("quantity_sold")
        rows = self.db.execute(
            select(
                OrderItemModel.product_id,
                func.max(OrderItemModel.product_name),
                quantity,
                func.sum(OrderItemModel.subtotal),
            )
            .join(OrderModel, OrderModel.id == OrderItemModel.order_id)
            .where(OrderModel.status != "cancelled")
            .group_by(OrderItemModel.product_id)
            .order_by(quantity.desc(), OrderItemModel.product_id)
            .limit(limit)
        ).all()
        return [
            {
                "product_id": product_id,
                "product_name": name,
                "quantity_sold": int(qty),
                "revenue": revenue,
            }
            for product_id, name, qty, revenue in rows
        ]

    def non_cancelled_orders(self) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).where(OrderModel.status != "cancelled").order_by(OrderModel.created_at)
            ).scalars()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
