"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

import structlog
from fastapi import FastAPI

from warranty_renewal import __version__
from warranty_renewal.api.dependencies import build_notifier, get_record_store
from warranty_renewal.api.v1.orders import router as orders_router
from warranty_renewal.api.webhooks.stream import router as stream_router
from warranty_renewal.config import settings
from warranty_renewal.database import dispose_engine
from warranty_renewal.expiry.sweeper import ExpirySweeper
from warranty_renewal.notifications.email import get_email_client
from warranty_renewal.notifications.sms import get_sms_client

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer() if settings.environment == "development"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


def build_sweeper() -> ExpirySweeper:
    store = get_record_store()
    notifier = build_notifier(store, get_email_client(), get_sms_client())
    return ExpirySweeper(
        store,
        notifier,
        settings.order_table,
        interval_seconds=settings.expiry_sweep_interval_seconds,
        batch_size=settings.expiry_sweep_batch_size,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(
        "app_starting",
        environment=settings.environment,
        table=settings.order_table,
        renewal_base_url=settings.renewal_base_url,
    )

    sweeper_task = None
    if settings.expiry_sweep_interval_seconds > 0:
        sweeper_task = asyncio.create_task(build_sweeper().run())

    yield

    if sweeper_task is not None:
        sweeper_task.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper_task
    await dispose_engine()
    logger.info("app_shutting_down")


app = FastAPI(
    title="Orders Warranty Renewal API",
    description="Vehicle orders with two-year warranties and renewal offers",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(orders_router)
app.include_router(stream_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}
