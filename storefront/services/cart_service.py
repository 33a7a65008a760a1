from contextlib import contextmanager
from decimal import Decimal
from typing import Dict, Any, NamedTuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import (
    CartConflictError,
    CartItemNotFoundError,
    InvalidQuantityError,
    PersistenceError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.services.catalog_service import CatalogService
from storefront.services.lock_service import LockService
from storefront.utils.settings import DEFAULT_PRODUCT_IMAGE
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class LineKey(NamedTuple):
    product_id: int
    size: int
    color: str


def _check_quantity(quantity) -> int:
    # bool to podklasa int, "true" jako ilosc nie ma sensu
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError("Ilosc musi byc liczba calkowita")
    if quantity <= 0:
        raise InvalidQuantityError("Ilosc musi byc wieksza niz 0")
    return quantity


def build_cart_view(user_id: int, cart: CartModel | None, items: list[CartItemModel]) -> Dict[str, Any]:
    """Widok koszyka liczony zawsze z cen snapshotu, nigdy z aktualnych cen produktu."""
    lines = [
        {
            "product_id": i.product_id,
            "name": i.name,
            "size": i.size,
            "color": i.color,
            "quantity": i.quantity,
            "price": i.price,
            "discounted_price": i.discounted_price,
            "unit_price": i.unit_price,
            "subtotal": i.subtotal,
            "image": i.image,
        }
        for i in items
    ]
    return {
        "cart_id": cart.id if cart else None,
        "user_id": user_id,
        "items": lines,
        "total": sum((line["subtotal"] for line in lines), Decimal("0.00")),
        "count": sum(i.quantity for i in items),
    }


class CartService:
    """
    Prosta implementacja cqrs dla domeny cart
    commands (add, remove, set_quantity) modyfikuja stan pod lockiem uzytkownika
    query (view, count) tylko odczyt
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
    ):
        self.repo = CartRepo(db)
        self.catalog = CatalogService(db)
        self.lock_service = lock_service

    #query - odczyt
    def view(self, user_id: int) -> Dict[str, Any]:
        with self._db_errors(f"odczyt koszyka uzytkownika {user_id}"):
            cart = self.repo.get_cart_by_user(user_id)
            items = self.repo.get_cart_items(cart.id) if cart else []
            return build_cart_view(user_id, cart, items)

    def count(self, user_id: int) -> int:
        with self._db_errors(f"licznik koszyka uzytkownika {user_id}"):
            return self.repo.count_items(user_id)

    #commands
    def add_item(
        self,
        user_id: int,
        product_id: int,
        size: int,
        color: str,
        quantity: int = 1,
    ) -> Dict[str, Any]:
        _check_quantity(quantity)

        with self.lock_service.cart_lock(user_id), self._db_errors(f"dodawanie do koszyka uzytkownika {user_id}"):
            #produkt musi istniec, stan sprawdzamy dopiero przy checkout
            product = self.catalog.get_product(product_id)
            cart = self._get_or_create_cart(user_id)

            existing_item = self.repo.get_cart_item(cart.id, product_id, size, color)

            if existing_item:
                logger.info(
                    f"Produkt {product_id} ({size}/{color}) juz jest w koszyku, zwiekszam ilosc "
                    f"z {existing_item.quantity} do {existing_item.quantity + quantity}"
                )
                # snapshot ceny zostaje z pierwszego dodania
                existing_item.quantity += quantity
                self.repo.add_cart_item(existing_item)
            else:
                logger.info(f"Dodaje nowy produkt {product_id} ({size}/{color}) do koszyka {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        size=size,
                        color=color,
                        quantity=quantity,
                        name=product.name,
                        price=product.price,
                        discounted_price=product.discount_price,
                        image=_snapshot_image(product),
                    )
                )

            self._bump_version_and_commit(cart)

        return self.view(user_id)

    def remove_item(self, user_id: int, product_id: int, size: int, color: str) -> Dict[str, Any]:
        with self.lock_service.cart_lock(user_id), self._db_errors(f"usuwanie z koszyka uzytkownika {user_id}"):
            cart = self.repo.get_cart_by_user(user_id)

            if cart:
                removed = self.repo.delete_cart_item(cart.id, product_id, size, color)
                if removed:
                    logger.info(f"Usunieto produkt {product_id} ({size}/{color}) z koszyka {cart.id}")
                    self._bump_version_and_commit(cart)

        return self.view(user_id)

    def set_quantity(self, user_id: int, key: LineKey, quantity: int) -> Dict[str, Any]:
        # 0 nie jest traktowane jako usuniecie, od tego jest remove_item
        _check_quantity(quantity)

        with self.lock_service.cart_lock(user_id), self._db_errors(f"zmiana ilosci w koszyku uzytkownika {user_id}"):
            cart = self.repo.get_cart_by_user(user_id)
            item = (
                self.repo.get_cart_item(cart.id, key.product_id, key.size, key.color)
                if cart
                else None
            )

            if not item:
                raise CartItemNotFoundError(key.product_id, key.size, key.color)

            logger.info(
                f"Zmiana ilosci produktu {key.product_id} ({key.size}/{key.color}) "
                f"w koszyku {cart.id}: {item.quantity} -> {quantity}"
            )
            item.quantity = quantity
            self.repo.add_cart_item(item)
            self._bump_version_and_commit(cart)

        return self.view(user_id)

    @contextmanager
    def _db_errors(self, action: str):
        # kazdy blad bazy -> rollback i PersistenceError, bez polowicznego stanu w sesji
        try:
            yield
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Blad bazy ({action}): {e}")
            raise PersistenceError("Nie udalo sie zapisac koszyka") from e

    def _get_or_create_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        logger.info(f"Utworzono nowy koszyk {created.id} dla uzytkownika {user_id}")
        return created

    def _bump_version_and_commit(self, cart: CartModel) -> None:
        old_version = cart.version

        # Optimistic locking warunek na wersje
        rowcount = self.repo.update_cart_version(cart.id, old_version)

        if rowcount == 0:
            self.repo.rollback()
            raise CartConflictError(
                "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
            )

        self.repo.commit()
        logger.info(f"Koszyk {cart.id} zapisany, nowa wersja: {old_version + 1}")


def _snapshot_image(product) -> str:
    for color in product.colors:
        if color.images:
            return color.images[0]
    return DEFAULT_PRODUCT_IMAGE
