# supergains/repos/product_repo.py
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from supergains.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def search(
        self,
        q: str | None = None,
        brand: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
    ) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.is_active.is_(True))

        if q:
            pattern = f"%{q.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(ProductModel.name).like(pattern),
                    func.lower(ProductModel.description).like(pattern),
                    func.lower(ProductModel.brand).like(pattern),
                )
            )
        if brand:
            stmt = stmt.where(func.lower(ProductModel.brand) == brand.lower())
        if min_price is not None:
            stmt = stmt.where(ProductModel.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(ProductModel.price <= max_price)

        return list(self.db.execute(stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())).scalars())

    def add(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
