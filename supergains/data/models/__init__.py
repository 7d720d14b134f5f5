#import all models so SQLAlchemy registers them in Base.metadata
from supergains.data.models.user import UserModel
from supergains.data.models.product import ProductModel
from supergains.data.models.inventory import InventoryModel
from supergains.data.models.cart import CartModel
from supergains.data.models.cart_item import CartItemModel
from supergains.data.models.order import OrderModel
from supergains.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "ProductModel",
    "InventoryModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
]
