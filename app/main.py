from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router
from datastore.reading_store import build_default_reading_store
from datastore.user_store import build_default_user_store
from feeds.thingspeak import build_default_feed_client
from logging_config import configure_logging
from services.analysis import build_default_analysis_service
from services.auth import build_default_auth_service
from services.scheduler import build_default_scheduler

logger = logging.getLogger(__name__)

_FACTORIES = (
    build_default_scheduler,
    build_default_analysis_service,
    build_default_auth_service,
    build_default_feed_client,
    build_default_reading_store,
    build_default_user_store,
)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    scheduler = build_default_scheduler()
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        await scheduler.feed_client.aclose()
        for factory in _FACTORIES:
            factory.cache_clear()


async def _http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"message": "Invalid request", "errors": errors},
    )


async def _unhandled_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Feed Monitor",
        description="Polls a ThingSpeak channel, stores readings and predicts temperature.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
    app.include_router(router)
    return app

app = create_app()
