# storefront/services/order_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.errors import OrderNotFoundError, PersistenceError
from storefront.domain.status import OrderStatus, PaymentStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Odczyt zamowien i zmiana statusu przez admina.
    Zamowienia tworzy wylacznie CheckoutService.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.repo = OrderRepo(db)
        self.notification_service = notification_service or NotificationService()

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        order = self.get_order_admin(order_id)

        if order.user_id != user_id:
            raise PermissionError("Brak dostępu do zamówienia")

        return order

    def get_order_admin(self, order_id: int) -> OrderModel:
        # szczegoly dla panelu admina, bez sprawdzania wlasciciela
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(self, user_id: int) -> list[OrderModel]:
        return self.repo.list_orders_by_user(user_id)

    def list_all_orders(self) -> list[OrderModel]:
        return self.repo.list_orders()

    def update_status(self, order_id: int, status) -> OrderModel:
        """
        Use Case: zmiana statusu (admin).

        Status normalizowany do OrderStatus; zakonczone zamowienie oznacza
        platnosc jako zrealizowana.
        """
        new_status = OrderStatus.parse(status)

        try:
            order = self.repo.get_order(order_id)
            if not order:
                raise OrderNotFoundError(order_id)

            payment_status = PaymentStatus.COMPLETED.value if new_status.is_complete else None
            order = self.repo.update_order_status(order_id, new_status.value, payment_status)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Nie udalo sie zmienic statusu zamowienia {order_id}: {e}")
            raise PersistenceError("Nie udalo sie zapisac statusu zamowienia") from e

        logger.info(f"Order {order_id} status -> {new_status.value}")

        try:
            self.notification_service.send_status_notification(order.user_id, order.id, new_status.value)
        except Exception as e:
            logger.warning(f"Nie udalo sie wyslac powiadomienia o statusie zamowienia {order_id}: {e}")

        return order
