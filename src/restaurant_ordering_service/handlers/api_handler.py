"""FastAPI application for the menu and order endpoints."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Union

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from restaurant_ordering_service.context import AppContext
from restaurant_ordering_service.errors import OrderingServiceError
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.models.order_models import (
    CreateOrderRequest,
    Order,
    PopulatedOrder,
    UpdateOrderStatusRequest,
)

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


def _error_response(status_code: int, error: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": str(error)})


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        # Drop the leading "body"/"query" segment
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(context: AppContext) -> FastAPI:
    """Create and configure the FastAPI application.

    Write endpoints answer 400 with ``{"message": ...}`` for any service
    error; read endpoints answer 500.

    Args:
        context: Application context holding services and settings

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        context.startup()
        yield
        context.shutdown()

    app = FastAPI(
        title="Restaurant Ordering Service API",
        description="Menu catalog and order management for the restaurant ordering app",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # StaticFiles fails on a missing directory, and the lifespan is off under Lambda
    context.image_storage.ensure_directory()
    app.mount(
        "/uploads",
        StaticFiles(directory=context.settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _format_validation_errors(exc)
        logger.info(f"Rejected {request.method} {request.url.path}: {message}")
        return JSONResponse(status_code=400, content={"message": message})

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.post("/api/menu-items", response_model=MenuItem, status_code=201, tags=["Menu"])
    async def add_menu_item(
        name: str | None = Form(None),
        description: str | None = Form(None),
        price: str | None = Form(None),
        image: UploadFile | None = File(None),
    ) -> Union[MenuItem, JSONResponse]:
        """Add a menu item, optionally with an image.

        Returns:
            The created menu item
        """
        image_filename = None
        image_content = None
        if image is not None and image.filename:
            image_filename = image.filename
            image_content = await image.read()

        try:
            return await app.state.context.menu_service.add_item(
                name=name,
                description=description,
                price=price,
                image_filename=image_filename,
                image_content=image_content,
            )
        except OrderingServiceError as e:
            logger.info(f"Menu item rejected: {e}")
            return _error_response(400, e)

    @app.get("/api/menu-items", response_model=list[MenuItem], tags=["Menu"])
    async def list_menu_items() -> Union[list[MenuItem], JSONResponse]:
        """List all menu items."""
        try:
            items: list[MenuItem] = await app.state.context.menu_service.list_items()
            return items
        except OrderingServiceError as e:
            logger.error(f"Failed to list menu items: {e}")
            return _error_response(500, e)

    @app.post("/api/orders", response_model=Order, status_code=201, tags=["Orders"])
    async def create_order(body: CreateOrderRequest) -> Union[Order, JSONResponse]:
        """Create an order from requested menu items.

        Returns:
            The created order with its snapshot total
        """
        try:
            return await app.state.context.order_service.create_order(body.items)
        except OrderingServiceError as e:
            logger.info(f"Order rejected: {e}")
            return _error_response(400, e)

    @app.get("/api/orders", response_model=list[PopulatedOrder], tags=["Orders"])
    async def list_orders() -> Union[list[PopulatedOrder], JSONResponse]:
        """List all orders with line items expanded to current menu data."""
        try:
            orders: list[PopulatedOrder] = await app.state.context.order_service.list_orders(
                populate=True
            )
            return orders
        except OrderingServiceError as e:
            logger.error(f"Failed to list orders: {e}")
            return _error_response(500, e)

    @app.patch("/api/orders/{order_id}", response_model=Order, tags=["Orders"])
    async def update_order_status(
        order_id: str, body: UpdateOrderStatusRequest
    ) -> Union[Order, JSONResponse]:
        """Update the status of an order.

        Returns:
            The updated order
        """
        try:
            return await app.state.context.order_service.update_status(order_id, body.status)
        except OrderingServiceError as e:
            logger.info(f"Status update for order {order_id} rejected: {e}")
            return _error_response(400, e)

    return app
