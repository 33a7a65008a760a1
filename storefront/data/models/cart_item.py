from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.services.pricing import resolve_price


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    size = Column(Integer, nullable=False)
    color = Column(String(50), nullable=False)
    quantity = Column(Integer, nullable=False)

    # snapshot z chwili dodania
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discounted_price = Column(Numeric(10, 2), nullable=True)
    image = Column(String, nullable=False)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", "size", "color", name="u_cart_line"),
    )

    @property
    def unit_price(self):
        return resolve_price(self.price, self.discounted_price)

    @property
    def subtotal(self):
        return self.unit_price * self.quantity
