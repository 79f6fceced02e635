"""Change-stream webhook — receives batches of removed order records."""

import pydantic
import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from warranty_renewal.api.dependencies import get_notifier
from warranty_renewal.api.request import read_json_object, validation_message
from warranty_renewal.api.response import error_response, format_json_response
from warranty_renewal.notifications.notifier import WarrantyExpiryNotifier
from warranty_renewal.schemas.order import StreamBatch

logger = structlog.get_logger()

router = APIRouter()


@router.post("/webhook/stream")
async def stream_webhook(
    request: Request,
    notifier: WarrantyExpiryNotifier = Depends(get_notifier),
) -> JSONResponse:
    """Receive REMOVE events and send expiry notifications.

    Body: {"Records": [{"eventName": "REMOVE", "oldImage": {...}}]}

    Returns 200 with the batch outcome, 400 for a malformed batch, or 502
    if any branch failed.
    """
    try:
        batch = StreamBatch.model_validate(await read_json_object(request))
    except pydantic.ValidationError as e:
        logger.error("stream_batch_invalid", error=str(e))
        return error_response(400, validation_message(e))

    logger.info("stream_batch_received", records=len(batch.records))

    outcome = await notifier.handle_batch(batch.records)
    data = outcome.model_dump(mode="json", by_alias=True)
    data["failed"] = outcome.failed

    if not outcome.ok:
        data["message"] = outcome.failures[0].reason
        return format_json_response(status_code=502, data=data)

    return format_json_response(data=data)
