# storefront/domain/errors.py


class StoreError(Exception):
    """Bazowy blad domeny sklepu."""


class NotFoundError(StoreError, LookupError):
    pass


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Produkt {product_id} nie istnieje")
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__(f"Zamowienie {order_id} nie istnieje")
        self.order_id = order_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int):
        super().__init__("User not found")
        self.user_id = user_id


class CartItemNotFoundError(NotFoundError):
    def __init__(self, product_id: int, size: int, color: str):
        super().__init__(
            f"Brak pozycji w koszyku: produkt {product_id}, rozmiar {size}, kolor {color}"
        )
        self.product_id = product_id
        self.size = size
        self.color = color


class InsufficientStockError(StoreError):
    def __init__(self, product_id: int, size: int, requested: int, available: int):
        super().__init__(
            f"Brak wystarczajacego stanu dla produktu {product_id} (rozmiar {size}): "
            f"zadano {requested}, dostepne {available}"
        )
        self.product_id = product_id
        self.size = size
        self.requested = requested
        self.available = available

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "size": self.size,
            "requested": self.requested,
            "available": self.available,
        }


class InvalidQuantityError(StoreError, ValueError):
    pass


class InvalidVariantError(StoreError, ValueError):
    pass


class InvalidStatusError(StoreError, ValueError):
    pass


class EmptyCartError(StoreError):
    pass


class CartBusyError(StoreError):
    """Inna operacja trzyma lock koszyka tego uzytkownika."""


class CartConflictError(StoreError):
    """Wersja koszyka zmienila sie w trakcie operacji (optimistic locking)."""


class PersistenceError(StoreError):
    """Baza albo redis niedostepne."""
