# supergains/data/models/inventory.py
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship

from supergains.data.database import Base

SELLABLE_STATUSES = ("active", "out_of_stock")


class InventoryModel(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        CheckConstraint("current_stock >= 0", name="ck_inventory_current_stock"),
        CheckConstraint("reserved_stock >= 0", name="ck_inventory_reserved_stock"),
    )

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, unique=True)
    current_stock = Column(Integer, nullable=False, default=0)
    min_stock = Column(Integer, nullable=False, default=5)
    max_stock = Column(Integer, nullable=False, default=100)
    reserved_stock = Column(Integer, nullable=False, default=0)
    total_sold = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active", index=True)
    notes = Column(String(500), nullable=True)
    last_restocked = Column(DateTime(timezone=True), nullable=True)
    last_sold = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    product = relationship("ProductModel", back_populates="inventory")

    @hybrid_property
    def available_stock(self):
        return max(0, self.current_stock - self.reserved_stock)

    @available_stock.expression
    def available_stock(cls):
        return cls.current_stock - cls.reserved_stock

    @property
    def needs_restock(self) -> bool:
        return self.current_stock <= self.min_stock

    @property
    def stock_status(self) -> str:
        if self.current_stock == 0:
            return "out_of_stock"
        if self.current_stock <= self.min_stock:
            return "low"
        if self.current_stock >= self.max_stock:
            return "high"
        return "normal"

    @property
    def is_sellable(self) -> bool:
        return self.status in SELLABLE_STATUSES

    def refresh_status(self) -> None:
        """active <-> out_of_stock follows available stock, manual statuses are kept."""
        if self.status == "active" and self.available_stock <= 0:
            self.status = "out_of_stock"
        elif self.status == "out_of_stock" and self.available_stock > 0:
            self.status = "active"
