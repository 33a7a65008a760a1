from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from storefront.data.models.product import ProductModel

from storefront.domain.errors import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from storefront.domain.schemas import SizeStockIn
from storefront.services.catalog_service import CatalogService


def test_get_missing_product(db):
    with pytest.raises(ProductNotFoundError):
        CatalogService(db).get_product(999)


def test_total_stock_is_sum_of_sizes(db, make_product):
    product = make_product(sizes=((8, 5), (9, 3), (10, 0)))
    assert product.total_stock == 8


def test_available_stock_for_unknown_size_is_zero(db, make_product):
    product = make_product(sizes=((9, 3),))
    catalog = CatalogService(db)
    assert catalog.available_stock(product.id, 9) == 3
    assert catalog.available_stock(product.id, 12) == 0


def test_decrement_stock(db, make_product):
    product = make_product(sizes=((9, 3),))
    catalog = CatalogService(db)

    catalog.decrement_stock(product.id, 9, 2)

    assert catalog.available_stock(product.id, 9) == 1


def test_decrement_beyond_stock_changes_nothing(db, make_product):
    product = make_product(sizes=((9, 3),))
    catalog = CatalogService(db)

    with pytest.raises(InsufficientStockError) as exc:
        catalog.decrement_stock(product.id, 9, 4)

    assert exc.value.requested == 4
    assert exc.value.available == 3
    assert catalog.available_stock(product.id, 9) == 3


def test_decrement_rejects_non_positive_amount(db, make_product):
    product = make_product()
    with pytest.raises(InvalidQuantityError):
        CatalogService(db).decrement_stock(product.id, 9, 0)


def test_concurrent_decrements_never_overshoot(session_factory, make_product):
    product = make_product(sizes=((9, 5),))
    product_id = product.id

    def buy_one(_):
        session = session_factory()
        try:
            CatalogService(session).decrement_stock(product_id, 9, 1)
            return True
        except InsufficientStockError:
            return False
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(buy_one, range(8)))

    assert results.count(True) == 5
    session = session_factory()
    try:
        assert CatalogService(session).available_stock(product_id, 9) == 0
    finally:
        session.close()


def test_set_sizes_replaces_stock(db, make_product):
    product = make_product(sizes=((8, 1), (9, 3)))
    catalog = CatalogService(db)

    updated = catalog.set_sizes(product.id, [SizeStockIn(size=9, quantity=7), SizeStockIn(size=11, quantity=2)])

    assert [(s.size, s.quantity) for s in updated.sizes] == [(9, 7), (11, 2)]
    assert updated.total_stock == 9
    assert catalog.available_stock(product.id, 8) == 0


def test_duplicate_sizes_rejected_by_schema():
    from pydantic import ValidationError
    from storefront.domain.schemas import SizesUpdateIn

    with pytest.raises(ValidationError):
        SizesUpdateIn(sizes=[{"size": 9, "quantity": 1}, {"size": 9, "quantity": 2}])


def test_featured_only_in_stock_newest_first(db, make_product):
    make_product(name="Old Featured", featured=True, sizes=((9, 1),))
    make_product(name="Sold Out", featured=True, sizes=((9, 0),))
    make_product(name="Plain", featured=False, sizes=((9, 4),))
    make_product(name="New Featured", featured=True, sizes=((9, 2),))

    names = [p.name for p in CatalogService(db).list_featured(limit=8)]

    assert names == ["New Featured", "Old Featured"]


def test_distinct_categories_and_brands(db, make_product):
    make_product(category="sports", brand="Stride")
    make_product(category="formal", brand="Royal")
    make_product(category="sports", brand="Royal")

    catalog = CatalogService(db)
    assert catalog.distinct_categories() == ["formal", "sports"]
    assert catalog.distinct_brands() == ["Royal", "Stride"]


def test_quickview(db, make_product):
    product = make_product(
        price="1299.00",
        discount_price="899.00",
        sizes=((8, 0), (9, 3)),
        colors=(("Black", "#000000"), ("Brown", "#5C4033")),
    )

    view = CatalogService(db).quickview(product.id)

    assert view["stock"] == 3
    assert view["sizes"] == [9]
    assert view["effective_price"] == 899
    assert [c["name"] for c in view["colors"]] == ["Black", "Brown"]
    assert view["images"] == ["/img/royal-oxford-black.jpg"]


def test_negative_discount_rejected_by_database(db):
    db.add(
        ProductModel(
            name="Broken",
            description="",
            category="formal",
            brand="Royal",
            price=Decimal("100.00"),
            discount_price=Decimal("-1.00"),
        )
    )

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_new_arrivals_only_recent_in_stock_newest_first(db, make_product):
    old = make_product(name="Old Classic", sizes=((9, 5),))
    make_product(name="Fresh Sold Out", sizes=((9, 0),))
    make_product(name="Fresh Loafer", sizes=((9, 1),))
    make_product(name="Fresh Runner", sizes=((10, 2),))

    old.created_at = datetime.now(timezone.utc) - timedelta(days=31)
    db.commit()

    catalog = CatalogService(db)
    assert [p.name for p in catalog.list_new_arrivals()] == ["Fresh Runner", "Fresh Loafer"]
    assert [p.name for p in catalog.list_new_arrivals(limit=1)] == ["Fresh Runner"]


def test_by_category_only_in_stock_newest_first(db, make_product):
    make_product(name="Trail", category="sports", sizes=((9, 1),))
    make_product(name="Oxford", category="formal", sizes=((9, 1),))
    make_product(name="Empty Court", category="sports", sizes=((9, 0),))
    make_product(name="Sprinter", category="sports", sizes=((9, 4),))

    names = [p.name for p in CatalogService(db).by_category("sports")]

    assert names == ["Sprinter", "Trail"]
    assert CatalogService(db).by_category("sandals") == []


def test_related_and_similar(db, make_product):
    product = make_product(name="Royal Oxford", category="formal", brand="Royal")
    other_brand = make_product(name="Stride Derby", category="formal", brand="Stride")
    same_brand = make_product(name="Royal Runner", category="sports", brand="Royal")
    make_product(name="Stride Trail", category="sports", brand="Stride")

    result = CatalogService(db).related(product.id)

    assert [p.id for p in result["related"]] == [other_brand.id]
    assert [p.id for p in result["similar"]] == [same_brand.id]


def test_related_is_limited(db, make_product):
    product = make_product(name="Royal Oxford", brand="Royal")
    for i in range(6):
        make_product(name=f"Royal Model {i}", brand="Royal")

    result = CatalogService(db).related(product.id)

    assert len(result["similar"]) == 4
    assert product.id not in [p.id for p in result["similar"]]
    assert result["related"] == []


def test_related_for_missing_product(db):
    with pytest.raises(ProductNotFoundError):
        CatalogService(db).related(999)
