"""Order schemas for the API, the store and the change stream."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class OrderCreate(BaseModel):
    """Order intake payload. Presence is validated by the intake service."""

    company_name: Optional[str] = Field(default=None, alias="companyName")
    car_name: Optional[str] = Field(default=None, alias="carName")
    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    model_config = {"populate_by_name": True}

    @field_validator("company_name", "car_name", "email", "phone_number", mode="before")
    @classmethod
    def coerce_field(cls, value: Any) -> Any:
        """Falsy values count as missing; numbers are kept as their text."""
        if not value:
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class OrderRecord(BaseModel):
    """A persisted order or renewal offer.

    Field names match the table columns; aliases are the wire names used in
    API responses and change-stream images.
    """

    order_id: str = Field(alias="orderId")
    company_name: str = Field(alias="companyName")
    car_name: str = Field(alias="carName")
    email: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    pk: str
    sk: str
    ttl: int = Field(alias="TTL")  # epoch seconds
    warranty_expiry: int = Field(alias="warrantyExpiry")  # epoch millis
    expired: Optional[bool] = None
    renews_order_id: Optional[str] = Field(default=None, alias="renewsOrderId")

    model_config = {"populate_by_name": True}

    @property
    def is_offer(self) -> bool:
        return self.expired is True

    def to_item(self) -> dict[str, Any]:
        """Column-keyed mapping for the record store."""
        return self.model_dump()

    def to_response(self) -> dict[str, Any]:
        """Wire representation; cleared fields are omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class OrderCreated(BaseModel):
    order_id: str = Field(alias="orderId")
    message: str

    model_config = {"populate_by_name": True}


class OrderRenewal(BaseModel):
    order_id: str = Field(alias="orderId")
    message: str

    model_config = {"populate_by_name": True}


class RemovalEvent(BaseModel):
    """One change-stream event carrying the image of a deleted record."""

    event_id: Optional[str] = Field(default=None, alias="eventID")
    event_name: str = Field(default="REMOVE", alias="eventName")
    old_image: dict[str, Any] = Field(default_factory=dict, alias="oldImage")

    model_config = {"populate_by_name": True}


class StreamBatch(BaseModel):
    records: list[RemovalEvent] = Field(default_factory=list, alias="Records")

    model_config = {"populate_by_name": True}


class Channel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class BranchFailure(BaseModel):
    order_id: Optional[str] = Field(default=None, alias="orderId")
    channel: Optional[Channel] = None
    reason: str

    model_config = {"populate_by_name": True}


class NotificationOutcome(BaseModel):
    """Aggregate result of one notifier batch."""

    succeeded: int = 0
    skipped: int = 0
    failures: list[BranchFailure] = []

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures
