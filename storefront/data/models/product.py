# storefront/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, index=True)
    brand = Column(String(100), nullable=False, index=True)

    price = Column(Numeric(10, 2), nullable=False)
    discount_price = Column(Numeric(10, 2), nullable=True)

    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    #stan magazynowy tylko per rozmiar, kolory dziela ten sam stan
    sizes = relationship(
        "ProductSizeModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductSizeModel.id",
    )
    colors = relationship(
        "ProductColorModel",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductColorModel.id",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint(
            "discount_price IS NULL OR discount_price >= 0",
            name="ck_products_discount_price_non_negative",
        ),
    )

    @property
    def total_stock(self) -> int:
        return sum(s.quantity for s in self.sizes)


class ProductSizeModel(Base):
    __tablename__ = "product_sizes"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    size = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)

    product = relationship("ProductModel", back_populates="sizes")

    __table_args__ = (
        UniqueConstraint("product_id", "size", name="u_product_size"),
        CheckConstraint("quantity >= 0", name="ck_product_sizes_quantity_non_negative"),
    )


class ProductColorModel(Base):
    __tablename__ = "product_colors"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    code = Column(String(20), nullable=False)
    images = Column(JSON, nullable=False, default=list)

    product = relationship("ProductModel", back_populates="colors")
