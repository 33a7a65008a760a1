from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from storefront.domain.errors import (
    CartBusyError,
    CartItemNotFoundError,
    InvalidQuantityError,
    PersistenceError,
    ProductNotFoundError,
)
from storefront.domain.schemas import SizeStockIn
from storefront.services.cart_service import CartService, LineKey
from storefront.services.catalog_service import CatalogService


@pytest.fixture
def carts(db, lock_service):
    return CartService(db, lock_service)


def test_count_without_cart_is_zero(carts):
    assert carts.count(42) == 0


def test_view_without_cart_is_empty(carts):
    view = carts.view(42)
    assert view["items"] == []
    assert view["total"] == Decimal("0.00")
    assert view["count"] == 0


def test_add_unknown_product_fails(carts):
    with pytest.raises(ProductNotFoundError):
        carts.add_item(1, 999, 9, "Black")


def test_add_creates_cart_with_snapshot(carts, make_product):
    product = make_product(price="1299.00", discount_price="899.00")

    view = carts.add_item(1, product.id, 9, "Black", 2)

    assert view["count"] == 2
    [line] = view["items"]
    assert line["name"] == "Royal Oxford"
    assert line["unit_price"] == Decimal("899.00")
    assert line["image"] == "/img/royal-oxford-black.jpg"
    assert view["total"] == Decimal("1798.00")


def test_same_variant_is_merged(carts, make_product):
    product = make_product()

    carts.add_item(1, product.id, 9, "Black", 2)
    view = carts.add_item(1, product.id, 9, "Black", 3)

    assert len(view["items"]) == 1
    assert view["items"][0]["quantity"] == 5
    assert carts.count(1) == 5


def test_different_color_is_separate_line(carts, make_product):
    product = make_product(colors=(("Black", "#000000"), ("Brown", "#5C4033")))

    carts.add_item(1, product.id, 9, "Black")
    view = carts.add_item(1, product.id, 9, "Brown")

    assert [(i["color"], i["quantity"]) for i in view["items"]] == [("Black", 1), ("Brown", 1)]


def test_add_does_not_check_stock(carts, make_product):
    product = make_product(sizes=((9, 1),))

    view = carts.add_item(1, product.id, 9, "Black", 10)

    assert view["count"] == 10


@pytest.mark.parametrize("quantity", [0, -1, "2", 1.5, True])
def test_add_rejects_invalid_quantity(carts, make_product, quantity):
    product = make_product()
    with pytest.raises(InvalidQuantityError):
        carts.add_item(1, product.id, 9, "Black", quantity)


def test_view_uses_snapshot_price(db, carts, make_product):
    product = make_product(price="1299.00")
    carts.add_item(1, product.id, 9, "Black", 1)

    product.price = Decimal("1999.00")
    db.commit()

    assert carts.view(1)["total"] == Decimal("1299.00")


def test_merge_keeps_first_snapshot(db, carts, make_product):
    product = make_product(price="1299.00")
    carts.add_item(1, product.id, 9, "Black", 1)

    product.price = Decimal("1999.00")
    db.commit()
    view = carts.add_item(1, product.id, 9, "Black", 1)

    assert view["items"][0]["unit_price"] == Decimal("1299.00")
    assert view["total"] == Decimal("2598.00")


def test_remove_item(carts, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    view = carts.remove_item(1, product.id, 9, "Black")

    assert view["items"] == []
    assert carts.count(1) == 0


def test_remove_missing_item_is_noop(carts, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    view = carts.remove_item(1, product.id, 10, "Black")
    assert view["count"] == 2

    assert carts.remove_item(7, product.id, 9, "Black")["items"] == []


def test_set_quantity(carts, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    view = carts.set_quantity(1, LineKey(product.id, 9, "Black"), 5)

    assert view["items"][0]["quantity"] == 5


def test_set_quantity_zero_is_rejected(carts, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    with pytest.raises(InvalidQuantityError):
        carts.set_quantity(1, LineKey(product.id, 9, "Black"), 0)

    assert carts.count(1) == 2


def test_set_quantity_missing_line(carts, make_product):
    product = make_product()
    with pytest.raises(CartItemNotFoundError):
        carts.set_quantity(1, LineKey(product.id, 9, "Black"), 1)


def test_carts_are_per_user(carts, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)
    carts.add_item(2, product.id, 9, "Black", 1)

    assert carts.count(1) == 2
    assert carts.count(2) == 1


def test_busy_lock_rejects_mutation(carts, lock_service, make_product):
    product = make_product()
    lock_service.acquire_cart_lock(1, "other-request", ttl=10)

    with pytest.raises(CartBusyError):
        carts.add_item(1, product.id, 9, "Black")

    assert carts.count(1) == 0


def test_lock_released_after_mutation(carts, redis_client, make_product):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black")

    assert redis_client.get("cart:1:lock") is None


def test_stock_edit_does_not_touch_cart(db, carts, make_product):
    product = make_product(sizes=((9, 3),))
    carts.add_item(1, product.id, 9, "Black", 2)

    CatalogService(db).set_sizes(product.id, [SizeStockIn(size=9, quantity=0)])

    assert carts.count(1) == 2


def test_db_error_on_add_becomes_persistence_error(carts, redis_client, make_product, monkeypatch):
    product = make_product()

    def broken_add(item):
        raise OperationalError("INSERT INTO cart_items", {}, Exception("db down"))

    monkeypatch.setattr(carts.repo, "add_cart_item", broken_add)

    with pytest.raises(PersistenceError):
        carts.add_item(1, product.id, 9, "Black")

    monkeypatch.undo()
    assert carts.count(1) == 0
    assert redis_client.get("cart:1:lock") is None


def test_db_error_on_remove_becomes_persistence_error(carts, make_product, monkeypatch):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    def broken_delete(*args):
        raise OperationalError("DELETE FROM cart_items", {}, Exception("db down"))

    monkeypatch.setattr(carts.repo, "delete_cart_item", broken_delete)

    with pytest.raises(PersistenceError):
        carts.remove_item(1, product.id, 9, "Black")

    assert carts.count(1) == 2


def test_db_error_on_read_becomes_persistence_error(carts, make_product, monkeypatch):
    product = make_product()
    carts.add_item(1, product.id, 9, "Black", 2)

    def broken_lookup(*args):
        raise OperationalError("SELECT cart_items", {}, Exception("db down"))

    monkeypatch.setattr(carts.repo, "get_cart_item", broken_lookup)

    with pytest.raises(PersistenceError):
        carts.set_quantity(1, LineKey(product.id, 9, "Black"), 3)
    with pytest.raises(PersistenceError):
        carts.add_item(1, product.id, 9, "Black")

    monkeypatch.undo()
    assert carts.count(1) == 2
