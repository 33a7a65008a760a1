# storefront/data/migrate.py
from sqlalchemy.orm import Session

from storefront.data.database import SessionLocal
from storefront.data.models.order import OrderModel
from storefront.domain.errors import InvalidStatusError
from storefront.domain.status import OrderStatus, PaymentStatus
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def migrate_legacy_statuses(db: Session) -> int:
    """Przepisuje stare warianty statusow ('pending', 'Pending', 'delivered'...) na kanoniczne.

    Zwraca liczbe zmienionych zamowien. Nierozpoznane wartosci zostaja bez zmian
    i trafiaja do logu.
    """
    repo = OrderRepo(db)
    changed = 0

    for order_id, status, payment_status in repo.status_values():
        try:
            new_status = OrderStatus.parse(status).value
            new_payment = PaymentStatus.parse(payment_status).value
        except InvalidStatusError as e:
            logger.warning(f"Zamowienie {order_id}: {e}, pomijam")
            continue

        if new_status != status or new_payment != payment_status:
            order = db.get(OrderModel, order_id)
            order.status = new_status
            order.payment_status = new_payment
            changed += 1

    repo.commit()
    logger.info(f"Zmigrowano statusy {changed} zamowien")
    return changed


if __name__ == "__main__":
    session = SessionLocal()
    try:
        migrate_legacy_statuses(session)
    finally:
        session.close()
