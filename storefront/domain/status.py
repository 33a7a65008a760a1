# storefront/domain/status.py
"""Kanoniczne statusy zamowien i platnosci.

Stare dane maja kilka konwencji ('pending', 'Pending', 'completed',
'delivered', ...). Wszystko jest normalizowane przy zapisie przez ``parse``,
zapytania porownuja juz tylko wartosci kanoniczne.
"""
from enum import Enum

from storefront.domain.errors import InvalidStatusError


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        status = _ORDER_SYNONYMS.get(key)
        if status is None:
            raise InvalidStatusError(f"Nieznany status zamowienia: {value!r}")
        return status

    @property
    def is_complete(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.DELIVERED)


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    @classmethod
    def parse(cls, value) -> "PaymentStatus":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        status = _PAYMENT_SYNONYMS.get(key)
        if status is None:
            raise InvalidStatusError(f"Nieznany status platnosci: {value!r}")
        return status


_ORDER_SYNONYMS = {
    "pending": OrderStatus.PENDING,
    "new": OrderStatus.PENDING,
    "awaiting payment": OrderStatus.PENDING,
    "processing": OrderStatus.PROCESSING,
    "confirmed": OrderStatus.PROCESSING,
    "shipped": OrderStatus.SHIPPED,
    "sent": OrderStatus.SHIPPED,
    "delivered": OrderStatus.DELIVERED,
    "completed": OrderStatus.COMPLETED,
    "complete": OrderStatus.COMPLETED,
    "cancelled": OrderStatus.CANCELLED,
    "canceled": OrderStatus.CANCELLED,
}

_PAYMENT_SYNONYMS = {
    "pending": PaymentStatus.PENDING,
    "unpaid": PaymentStatus.PENDING,
    "completed": PaymentStatus.COMPLETED,
    "paid": PaymentStatus.COMPLETED,
    "failed": PaymentStatus.FAILED,
    "refunded": PaymentStatus.REFUNDED,
}
