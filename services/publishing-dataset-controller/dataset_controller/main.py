# services/publishing-dataset-controller/dataset_controller/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from dataset_controller.config import settings
from dataset_controller.infra.logging import setup_logging
from dataset_controller.clients.http_utils import close_http_clients
from dataset_controller.core.errors import ControllerError
from dataset_controller.api.routers import dataset_routes
from dataset_controller.api.routers import health_routes

logger = logging.getLogger("dataset_controller.main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    App lifespan:
      - configure logging
      - graceful shutdown: pooled upstream HTTP clients
    """
    setup_logging(settings.service_name)
    logger.info("%s starting up", settings.service_name)
    logger.info(
        "config on startup: dataset_api=%s zebedee=%s babbage=%s batch_size=%d batch_workers=%d",
        settings.dataset_api_url,
        settings.zebedee_url,
        settings.babbage_url,
        settings.datasets_batch_size,
        settings.datasets_batch_workers,
    )

    try:
        yield
    finally:
        try:
            await close_http_clients()
        except Exception:
            logger.warning("Error closing upstream HTTP clients", exc_info=True)

        logger.info("%s shutdown complete", settings.service_name)


app = FastAPI(
    title="Publishing Dataset Controller",
    description="Browse and edit datasets for the publishing UI",
    version=settings.service_version,
    lifespan=lifespan,
)


@app.exception_handler(ControllerError)
async def controller_error_handler(request: Request, exc: ControllerError) -> PlainTextResponse:
    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    return PlainTextResponse(f"{exc.message}\n", status_code=exc.status_code)


app.include_router(health_routes.router)
app.include_router(dataset_routes.router)


def run() -> None:
    import uvicorn

    host, port = settings.bind_host_port()
    uvicorn.run(
        app,
        host=host,
        port=port,
        timeout_graceful_shutdown=settings.graceful_shutdown_timeout_seconds,
    )


if __name__ == "__main__":
    run()
