"""Order model: active orders and renewal offers share one table."""

from typing import Optional

from sqlalchemy import BigInteger, Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from warranty_renewal.config import settings
from warranty_renewal.models.base import Base

USER_INDEX = "orders_by_user"
OFFER_INDEX = "offers_by_order"


class Order(Base):
    __tablename__ = settings.order_table

    order_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Purchase
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    car_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Contact (at least one is set)
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Access pattern: all records of one contact, ordered by expiry
    pk: Mapped[str] = mapped_column(String(320), nullable=False)
    sk: Mapped[str] = mapped_column(String(64), nullable=False)

    # Expiry
    ttl: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)  # epoch seconds
    warranty_expiry: Mapped[int] = mapped_column(BigInteger, nullable=False)  # epoch millis
    expired: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)  # true on offers

    # Offers only: the lapsed order this offer renews
    renews_order_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        Index(USER_INDEX, "pk", "sk"),
        Index(OFFER_INDEX, "renews_order_id", "sk"),
    )
