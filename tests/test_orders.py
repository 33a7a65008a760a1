from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models.order import OrderModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import OrderNotFoundError, PersistenceError, UserNotFoundError
from storefront.services.order_service import OrderService
from storefront.services.user_service import UserService


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_status_notification(self, user_id, order_id, status):
        self.sent.append((user_id, order_id, status))


def add_order(db, number, user_id=1, status="PENDING"):
    order = OrderModel(
        order_number=number,
        user_id=user_id,
        status=status,
        payment_status="PENDING",
        total_amount=Decimal("100.00"),
    )
    db.add(order)
    db.commit()
    return order


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def orders(db, notifications):
    return OrderService(db, notifications)


def test_owner_check(db, orders):
    order = add_order(db, "SR-1", user_id=1)

    assert orders.get_order(order.id, 1).order_number == "SR-1"
    with pytest.raises(PermissionError):
        orders.get_order(order.id, 2)


def test_admin_detail_skips_owner_check(db, orders):
    order = add_order(db, "SR-1", user_id=7)

    assert orders.get_order_admin(order.id).user_id == 7
    with pytest.raises(OrderNotFoundError):
        orders.get_order_admin(999)


def test_update_status_completes_payment(db, orders, notifications):
    order = add_order(db, "SR-1")

    updated = orders.update_status(order.id, "delivered")

    assert updated.status == "DELIVERED"
    assert updated.payment_status == "COMPLETED"
    assert notifications.sent == [(1, order.id, "DELIVERED")]


def test_update_status_db_error_becomes_persistence_error(db, orders, notifications, monkeypatch):
    order = add_order(db, "SR-1")

    def broken_update(*args):
        raise OperationalError("UPDATE orders", {}, Exception("db down"))

    monkeypatch.setattr(orders.repo, "update_order_status", broken_update)

    with pytest.raises(PersistenceError):
        orders.update_status(order.id, "completed")

    assert db.get(OrderModel, order.id).status == "PENDING"
    assert notifications.sent == []


def test_list_users_newest_first(db):
    db.add(UserModel(id=1, name="Ada"))
    db.commit()
    db.add(UserModel(id=2, name="Grace"))
    db.commit()

    assert [u.name for u in UserService(db).list_users()] == ["Grace", "Ada"]


def test_user_detail_with_orders(db):
    db.add(UserModel(id=1, name="Ada"))
    db.commit()
    add_order(db, "SR-1", user_id=1)
    add_order(db, "SR-2", user_id=1)
    add_order(db, "SR-3", user_id=2)

    detail = UserService(db).user_detail(1)

    assert detail.user.name == "Ada"
    assert [o.order_number for o in detail.orders] == ["SR-2", "SR-1"]

    with pytest.raises(UserNotFoundError):
        UserService(db).user_detail(5)
