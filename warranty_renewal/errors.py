"""Error taxonomy shared by the services and the HTTP layer."""


class WarrantyServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WarrantyServiceError):
    """A required field is missing from the request."""


class OrderNotFoundError(WarrantyServiceError):
    """The addressed order does not exist."""

    def __init__(self, order_id: str):
        super().__init__(f"Order {order_id} not found")
        self.order_id = order_id


class StoreError(WarrantyServiceError):
    """The record store rejected or failed an operation."""


class DeliveryError(WarrantyServiceError):
    """An email or SMS could not be handed to its transport."""
