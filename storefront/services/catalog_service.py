# storefront/services/catalog_service.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel, ProductSizeModel, ProductColorModel
from storefront.domain.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    PersistenceError,
    ProductNotFoundError,
)
from storefront.domain.schemas import ProductIn, SizeStockIn
from storefront.repos.product_repo import ProductRepo
from storefront.services.pricing import effective_price
from storefront.utils.settings import (
    CATEGORY_LIMIT,
    FEATURED_LIMIT,
    NEW_ARRIVALS_DAYS,
    NEW_ARRIVALS_LIMIT,
    RELATED_LIMIT,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """
    Katalog produktow ze stanem magazynowym per rozmiar.
    Jedyne miejsca zmieniajace stan: edycje admina i decrement_stock (checkout).
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #query
    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFoundError(product_id)
        return product

    def available_stock(self, product_id: int, size: int) -> int:
        self.get_product(product_id)
        quantity = self.repo.get_size_quantity(product_id, size)
        return quantity or 0

    def list_featured(self, limit: int = FEATURED_LIMIT) -> list[ProductModel]:
        return self.repo.list_featured(limit)

    def list_new_arrivals(
        self,
        limit: int = NEW_ARRIVALS_LIMIT,
        days: int = NEW_ARRIVALS_DAYS,
        now: datetime | None = None,
    ) -> list[ProductModel]:
        """Produkty na stanie dodane w ostatnich `days` dniach, najnowsze pierwsze."""
        since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
        return self.repo.list_created_since(since, limit)

    def by_category(self, category: str, limit: int = CATEGORY_LIMIT) -> list[ProductModel]:
        return self.repo.list_by_category(category, limit)

    def related(self, product_id: int, limit: int = RELATED_LIMIT) -> dict[str, list[ProductModel]]:
        """
        Propozycje na stronie produktu:
        related - ta sama kategoria, inna marka
        similar - ta sama marka
        """
        product = self.get_product(product_id)
        return {
            "related": self.repo.list_related(product, limit),
            "similar": self.repo.list_same_brand(product, limit),
        }

    def distinct_categories(self) -> list[str]:
        return self.repo.distinct_categories()

    def distinct_brands(self) -> list[str]:
        return self.repo.distinct_brands()

    def quickview(self, product_id: int) -> dict:
        product = self.get_product(product_id)
        images = list(product.colors[0].images) if product.colors else []
        return {
            "id": product.id,
            "name": product.name,
            "price": product.price,
            "discount_price": product.discount_price,
            "effective_price": effective_price(product),
            "images": images,
            "stock": product.total_stock,
            "sizes": [s.size for s in product.sizes if s.quantity > 0],
            "colors": [{"name": c.name, "code": c.code} for c in product.colors],
            "brand": product.brand,
            "category": product.category,
        }

    #commands
    def decrement_stock(self, product_id: int, size: int, amount: int) -> None:
        if amount <= 0:
            raise InvalidQuantityError("Ilosc musi byc wieksza niz 0")

        self.get_product(product_id)

        if not self.repo.decrement_stock(product_id, size, amount):
            self.repo.rollback()
            available = self.repo.get_size_quantity(product_id, size) or 0
            raise InsufficientStockError(product_id, size, amount, available)

        self._commit()
        logger.info(f"Stan produktu {product_id} (rozmiar {size}) zmniejszony o {amount}")

    def create_product(self, payload: ProductIn) -> ProductModel:
        product = ProductModel(
            name=payload.name,
            description=payload.description,
            category=payload.category,
            brand=payload.brand,
            price=payload.price,
            discount_price=payload.discount_price,
            featured=payload.featured,
            sizes=[ProductSizeModel(size=s.size, quantity=s.quantity) for s in payload.sizes],
            colors=[
                ProductColorModel(name=c.name, code=c.code, images=list(c.images))
                for c in payload.colors
            ],
        )
        self.repo.add_product(product)
        self._commit()

        logger.info(f"Utworzono produkt {product.id} ({product.name})")
        return product

    def set_sizes(self, product_id: int, sizes: list[SizeStockIn]) -> ProductModel:
        """Zastepuje tabele rozmiarow produktu (edycja admina)."""
        product = self.get_product(product_id)

        # kolekcja jest podmieniana w calosci, unikalnosc rozmiarow pilnuje schema + constraint
        product.sizes.clear()
        self.repo.flush()
        product.sizes.extend(ProductSizeModel(size=s.size, quantity=s.quantity) for s in sizes)
        self._commit()

        logger.info(f"Zaktualizowano rozmiary produktu {product_id}, stan: {product.total_stock}")
        return product

    def delete_product(self, product_id: int) -> None:
        product = self.get_product(product_id)
        self.repo.delete_product(product)
        self._commit()
        logger.info(f"Usunieto produkt {product_id}")

    def _commit(self):
        try:
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Blad zapisu katalogu: {e}")
            raise PersistenceError("Nie udalo sie zapisac zmian w katalogu") from e
