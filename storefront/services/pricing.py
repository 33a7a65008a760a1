# storefront/services/pricing.py
from decimal import Decimal, InvalidOperation


def _as_decimal(value) -> Decimal | None:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def resolve_price(price, discount_price=None) -> Decimal:
    """Cena efektywna: promocyjna jesli jest poprawna (liczba >= 0), inaczej bazowa."""
    discount = _as_decimal(discount_price)
    if discount is not None and discount >= 0:
        return discount
    return _as_decimal(price) or Decimal("0.00")


def effective_price(product) -> Decimal:
    return resolve_price(product.price, product.discount_price)
