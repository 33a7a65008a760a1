# storefront/services/checkout_service.py
import uuid
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel, OrderItemModel
from storefront.domain.errors import (
    CartConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidVariantError,
    PersistenceError,
    ProductNotFoundError,
)
from storefront.domain.status import OrderStatus, PaymentStatus
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import build_cart_view
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _order_number() -> str:
    return f"SR-{uuid.uuid4().hex[:8].upper()}"


class CheckoutService:
    """
    Zamiana koszyka na zamowienie.

    Jedyne miejsce, ktore zmniejsza stan magazynowy na podstawie koszyka.
    Cala operacja (dekrementacja stanu, zapis zamowienia, czyszczenie koszyka)
    idzie w jednej transakcji bazy: albo wszystko, albo nic.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

    def checkout(self, user_id: int) -> OrderModel:
        """
        Use Case: checkout.

        1. Laduje koszyk, pusty -> EmptyCartError
        2. Sprawdza aktualny stan kazdej pozycji (w kolejnosci koszyka)
        3. Warunkowo zmniejsza stan dla wszystkich pozycji
        4. Zapisuje zamowienie i czysci koszyk, jeden commit
        """
        with self.lock_service.cart_lock(user_id):
            cart = self.carts.get_cart_by_user(user_id)
            items = self.carts.get_cart_items(cart.id) if cart else []

            if not items:
                raise EmptyCartError("Nie mozna zlozyc zamowienia z pustego koszyka")

            logger.info(f"Checkout koszyka {cart.id} uzytkownika {user_id} ({len(items)} pozycji)")

            self._verify_stock(items)
            view = build_cart_view(user_id, cart, items)

            try:
                for item in items:
                    if not self.products.decrement_stock(item.product_id, item.size, item.quantity):
                        # ktos inny kupil w miedzyczasie, cofamy wszystkie dekrementacje
                        self.db.rollback()
                        available = self.products.get_size_quantity(item.product_id, item.size) or 0
                        raise InsufficientStockError(item.product_id, item.size, item.quantity, available)

                order = OrderModel(
                    order_number=_order_number(),
                    user_id=user_id,
                    status=OrderStatus.PENDING.value,
                    payment_status=PaymentStatus.PENDING.value,
                    total_amount=view["total"],
                    items=[
                        OrderItemModel(
                            product_id=item.product_id,
                            name=item.name,
                            price=item.unit_price,
                            quantity=item.quantity,
                            size=item.size,
                            color=item.color,
                        )
                        for item in items
                    ],
                )
                self.orders.add_order(order)

                self.carts.clear_cart(cart.id)
                if self.carts.update_cart_version(cart.id, cart.version) == 0:
                    self.db.rollback()
                    raise CartConflictError(
                        "Konflikt wspolbieznosci - koszyk zostal zmodyfikowany przez inna operacje"
                    )

                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Checkout koszyka {cart.id} nieudany, transakcja wycofana: {e}")
                raise PersistenceError("Nie udalo sie zapisac zamowienia") from e

        logger.info(
            f"Zamowienie {order.order_number} (id {order.id}) utworzone z koszyka {cart.id}, "
            f"suma {order.total_amount}"
        )

        try:
            self.notification_service.send_order_notification(user_id, order.id)
        except Exception as e:
            # zamowienie jest juz zapisane, brak powiadomienia nie moze go cofnac
            logger.warning(f"Nie udalo sie wyslac powiadomienia o zamowieniu {order.id}: {e}")

        return order

    def _verify_stock(self, items) -> None:
        # popyt sumowany per (produkt, rozmiar), bo kolory dziela ten sam stan
        demand: dict[tuple[int, int], int] = {}

        for item in items:
            product = self.products.get_product(item.product_id)
            if not product:
                raise ProductNotFoundError(item.product_id)

            color_names = [c.name for c in product.colors]
            if color_names and item.color not in color_names:
                raise InvalidVariantError(
                    f"Kolor {item.color} nie jest dostepny dla produktu {item.product_id}"
                )

            key = (item.product_id, item.size)
            demand[key] = demand.get(key, 0) + item.quantity

            available = self.products.get_size_quantity(item.product_id, item.size) or 0
            if available < demand[key]:
                logger.info(
                    f"Brak stanu: produkt {item.product_id} rozmiar {item.size}, "
                    f"zadano {demand[key]}, dostepne {available}"
                )
                raise InsufficientStockError(item.product_id, item.size, demand[key], available)
