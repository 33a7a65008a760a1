#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel, ProductSizeModel, ProductColorModel
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel, OrderItemModel

__all__ = [
    "UserModel",
    "ProductModel",
    "ProductSizeModel",
    "ProductColorModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
]
