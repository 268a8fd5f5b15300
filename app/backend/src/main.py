"""Entrypoint for the FastAPI application."""

import os
from dotenv import load_dotenv

# Load .env locally only; deployments inject env vars directly.
env_path = os.path.join(os.path.dirname(__file__), "../.env")
if os.path.exists(env_path):
    load_dotenv(dotenv_path=os.path.abspath(env_path))

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from .api import (
    auth,
    health,
    invoices,
    notifications,
    products,
    webhooks,
)
from .core.errors import InvoiceServiceError
from .core.logging import configure_logging

LOGGER = structlog.get_logger(__name__)


async def _invoice_service_error_handler(request: Request, exc: InvoiceServiceError) -> JSONResponse:
    LOGGER.info(
        "business_fault",
        code=exc.code,
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def _integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    LOGGER.warning("integrity_violation", path=request.url.path, error=str(exc.orig))
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Data integrity violation", "code": "DATA_INTEGRITY_VIOLATION"},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Unexpected error occurred"},
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Purchase Invoice Service", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InvoiceServiceError, _invoice_service_error_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(invoices.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(notifications.router, prefix="/api")
    app.include_router(webhooks.router)

    return app


app = create_app()
