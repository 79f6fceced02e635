"""Orders API — intake, lookup and warranty renewal."""

from typing import Optional

import pydantic
import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from warranty_renewal.api.dependencies import (
    get_intake_service,
    get_lookup_service,
    get_renewal_service,
)
from warranty_renewal.api.request import read_json_object, validation_message
from warranty_renewal.api.response import error_response, format_json_response
from warranty_renewal.errors import OrderNotFoundError, StoreError, ValidationError
from warranty_renewal.orders.intake import OrderIntakeService
from warranty_renewal.orders.lookup import OrderLookupService
from warranty_renewal.orders.renewal import RenewalService
from warranty_renewal.schemas.order import OrderCreate

logger = structlog.get_logger()

router = APIRouter(tags=["orders"])


@router.post("/")
async def create_order(
    request: Request,
    service: OrderIntakeService = Depends(get_intake_service),
) -> JSONResponse:
    """Create an order with a two-year warranty.

    Body: {"companyName", "carName", "email" and/or "phoneNumber"}

    Returns:
        {"data": {"orderId": str, "message": str}}
    """
    try:
        payload = OrderCreate.model_validate(await read_json_object(request))
        created = await service.create_order(payload)
    except pydantic.ValidationError as e:
        logger.warning("create_order_invalid_body", error=str(e))
        return error_response(400, validation_message(e))
    except ValidationError as e:
        return error_response(400, e.message)
    except StoreError as e:
        logger.error("create_order_failed", error=e.message)
        return error_response(502, e.message)

    return format_json_response(data=created.model_dump(by_alias=True))


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    service: OrderLookupService = Depends(get_lookup_service),
) -> JSONResponse:
    """Fetch one order or renewal offer; {} when it does not exist."""
    return await _get_order(order_id, service)


@router.get("/orders/")
async def get_order_without_id(
    service: OrderLookupService = Depends(get_lookup_service),
) -> JSONResponse:
    return await _get_order(None, service)


@router.get("/users/{user_id}/orders")
async def get_user_orders(
    user_id: str,
    service: OrderLookupService = Depends(get_lookup_service),
) -> JSONResponse:
    """List a user's orders and offers, oldest expiry first."""
    try:
        records = await service.list_user_orders(user_id)
    except ValidationError as e:
        return error_response(400, e.message)
    except StoreError as e:
        logger.error("get_user_orders_failed", user_id=user_id, error=e.message)
        return error_response(500, e.message)

    return format_json_response(data=[record.to_response() for record in records])


@router.post("/renew")
async def renew_order(
    order_id: Optional[str] = Query(None, alias="orderId"),
    service: RenewalService = Depends(get_renewal_service),
) -> JSONResponse:
    """Redeem a renewal: extend the warranty of `orderId` by two years."""
    try:
        renewal = await service.renew(order_id)
    except ValidationError as e:
        return error_response(400, e.message)
    except OrderNotFoundError as e:
        return error_response(404, e.message)
    except StoreError as e:
        logger.error("renew_order_failed", order_id=order_id, error=e.message)
        return error_response(502, e.message)

    return format_json_response(data=renewal.model_dump(by_alias=True))


async def _get_order(
    order_id: Optional[str],
    service: OrderLookupService,
) -> JSONResponse:
    try:
        record = await service.get_order(order_id)
    except ValidationError as e:
        return error_response(400, e.message)
    except StoreError as e:
        logger.error("get_order_failed", order_id=order_id, error=e.message)
        return error_response(500, e.message)

    return format_json_response(data=record.to_response() if record else {})

