from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes_auth import router as auth_router
from app.api.routes_orders import router as orders_router
from app.api.routes_products import router as products_router
from app.api.utils import api_response
from app.core.config import get_settings
from app.core.logging import configure_logging
from app.domain.orders.errors import (
    NoOrdersError,
    NotEligibleError,
    OrderNotFoundError,
    OrderValidationError,
    ProductNotFoundError,
    StoreError,
)
from app.persistence.pg import init_db

configure_logging()
logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(title=settings.app_name)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    logger.info("storefront api ready: env=%s", settings.env)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_: Request, exc: StarletteHTTPException):
    return api_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', '')}" for err in exc.errors()
    )
    return api_response(422, "Invalid input", error=problems)


@app.exception_handler(OrderValidationError)
async def order_validation_handler(_: Request, exc: OrderValidationError):
    return api_response(400, "Invalid input", error=str(exc))


@app.exception_handler(ProductNotFoundError)
async def product_not_found_handler(_: Request, exc: ProductNotFoundError):
    return api_response(404, "One or more products do not exist", error=str(exc))


@app.exception_handler(OrderNotFoundError)
async def order_not_found_handler(_: Request, exc: OrderNotFoundError):
    return api_response(404, "Order not found")


@app.exception_handler(NotEligibleError)
async def not_eligible_handler(_: Request, exc: NotEligibleError):
    return api_response(400, "Order cannot be canceled", error="Order status must be 'pending' to cancel")


@app.exception_handler(NoOrdersError)
async def no_orders_handler(_: Request, exc: NoOrdersError):
    return api_response(404, "No orders found")


@app.exception_handler(StoreError)
async def store_error_handler(_: Request, exc: StoreError):
    logger.error("store failure: %s", exc, exc_info=exc)
    return api_response(500, "Internal server error", error=exc.operation)


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(products_router)
app.include_router(orders_router)
