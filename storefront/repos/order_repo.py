# storefront/repos/order_repo.py
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.status import OrderStatus, PaymentStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita, transakcje kontroluje checkout
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def list_orders_by_user(self, user_id: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def list_orders(self) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def recent_orders(self, limit: int) -> list[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
                .limit(limit)
            ).scalars().all()
        )

    def update_order_status(self, order_id: int, status: str, payment_status: str | None = None) -> OrderModel | None:
        order = self.get_order(order_id)
        if order:
            order.status = status
            if payment_status is not None:
                order.payment_status = payment_status
            order.updated_at = datetime.now(timezone.utc)
            self.db.commit()
            self.db.refresh(order)
        return order

    def count_orders(self) -> int:
        return self.db.execute(select(func.count(OrderModel.id))).scalar_one()

    def count_by_status(self, status: OrderStatus) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.status == status.value)
        ).scalar_one()

    def count_created_since(self, since: datetime) -> int:
        return self.db.execute(
            select(func.count(OrderModel.id)).where(OrderModel.created_at >= since)
        ).scalar_one()

    def sum_revenue(self) -> Decimal:
        completed = [s.value for s in OrderStatus if s.is_complete]
        total = self.db.execute(
            select(func.sum(OrderModel.total_amount)).where(
                or_(
                    OrderModel.status.in_(completed),
                    OrderModel.payment_status == PaymentStatus.COMPLETED.value,
                )
            )
        ).scalar_one_or_none()
        if total is None:
            return Decimal("0.00")
        return Decimal(str(total))

    def status_values(self) -> list[tuple[int, str, str]]:
        return list(
            self.db.execute(
                select(OrderModel.id, OrderModel.status, OrderModel.payment_status)
            ).all()
        )

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
