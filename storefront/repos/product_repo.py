# storefront/repos/product_repo.py
from datetime import datetime

from sqlalchemy import select, update, func, exists
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel, ProductSizeModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_size_quantity(self, product_id: int, size: int) -> int | None:
        return self.db.execute(
            select(ProductSizeModel.quantity).where(
                ProductSizeModel.product_id == product_id,
                ProductSizeModel.size == size,
            )
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, size: int, amount: int) -> bool:
        # warunkowy UPDATE w jednym zapytaniu, baza sama serializuje rownolegle dekrementacje
        # UPDATE product_sizes SET quantity = quantity - 2 WHERE product_id = 1 AND size = 9 AND quantity >= 2
        result = self.db.execute(
            update(ProductSizeModel)
            .where(
                ProductSizeModel.product_id == product_id,
                ProductSizeModel.size == size,
                ProductSizeModel.quantity >= amount,
            )
            .values(quantity=ProductSizeModel.quantity - amount)
        )
        return result.rowcount == 1

    def list_featured(self, limit: int) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.featured.is_(True), _in_stock())
                .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )

    def list_created_since(self, since: datetime, limit: int) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.created_at >= since, _in_stock())
                .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )

    def list_by_category(self, category: str, limit: int) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.category == category, _in_stock())
                .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )

    def list_related(self, product: ProductModel, limit: int) -> list[ProductModel]:
        # ta sama kategoria, inna marka
        return list(
            self.db.execute(
                select(ProductModel)
                .where(
                    ProductModel.category == product.category,
                    ProductModel.brand != product.brand,
                    ProductModel.id != product.id,
                )
                .order_by(ProductModel.id)
                .limit(limit)
            ).scalars().all()
        )

    def list_same_brand(self, product: ProductModel, limit: int) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.brand == product.brand, ProductModel.id != product.id)
                .order_by(ProductModel.id)
                .limit(limit)
            ).scalars().all()
        )

    def distinct_categories(self) -> list[str]:
        return list(
            self.db.execute(
                select(ProductModel.category).distinct().order_by(ProductModel.category)
            ).scalars().all()
        )

    def distinct_brands(self) -> list[str]:
        return list(
            self.db.execute(
                select(ProductModel.brand).distinct().order_by(ProductModel.brand)
            ).scalars().all()
        )

    def count_products(self) -> int:
        return self.db.execute(select(func.count(ProductModel.id))).scalar_one()

    def count_low_stock(self, threshold: int) -> int:
        totals = (
            select(
                ProductSizeModel.product_id,
                func.sum(ProductSizeModel.quantity).label("total"),
            )
            .group_by(ProductSizeModel.product_id)
            .subquery()
        )
        return self.db.execute(
            select(func.count()).select_from(totals).where(
                totals.c.total > 0,
                totals.c.total < threshold,
            )
        ).scalar_one()

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def flush(self):
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()


def _in_stock():
    # produkt ma przynajmniej jeden rozmiar na stanie
    return exists().where(
        ProductSizeModel.product_id == ProductModel.id,
        ProductSizeModel.quantity > 0,
    )
