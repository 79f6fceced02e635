"""SQLAlchemy ORM models."""

from warranty_renewal.models.base import Base
from warranty_renewal.models.order import OFFER_INDEX, USER_INDEX, Order

__all__ = [
    "Base",
    "OFFER_INDEX",
    "Order",
    "USER_INDEX",
]
