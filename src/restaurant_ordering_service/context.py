"""Application context: the storage connection and the objects built on it.

One ``AppContext`` is created per process and handed to ``create_app``; the
FastAPI lifespan drives ``startup()`` and ``shutdown()``.
"""

import logging
from typing import Any

import boto3

from restaurant_ordering_service.config import Settings
from restaurant_ordering_service.repositories.ordering_repositories import (
    MenuItemRepository,
    OrderRepository,
)
from restaurant_ordering_service.services.image_storage import ImageStorage
from restaurant_ordering_service.services.menu_service import MenuService
from restaurant_ordering_service.services.order_service import OrderService
from restaurant_ordering_service.services.pricing_service import OrderPricingEngine

logger = logging.getLogger(__name__)


def create_dynamodb_resource(settings: Settings) -> Any:
    """Create a DynamoDB resource for the configured endpoint.

    Args:
        settings: Process settings

    Returns:
        Boto3 DynamoDB resource
    """
    if settings.dynamodb_endpoint:
        logger.info(f"Using local DynamoDB at {settings.dynamodb_endpoint}")
        return boto3.resource(
            "dynamodb",
            endpoint_url=settings.dynamodb_endpoint,
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )

    # Default credential chain (IAM role, env vars, etc.)
    logger.info(f"Using AWS DynamoDB in region {settings.aws_region}")
    return boto3.resource("dynamodb", region_name=settings.aws_region)


class AppContext:
    """Holds settings, the DynamoDB resource, repositories and services."""

    def __init__(self, settings: Settings, dynamodb_resource: Any) -> None:
        """Wire repositories and services onto a DynamoDB resource.

        Args:
            settings: Process settings
            dynamodb_resource: Boto3 DynamoDB resource (or a stand-in in tests)
        """
        self.settings = settings
        self.dynamodb = dynamodb_resource

        self.menu_repository = MenuItemRepository(
            dynamodb_resource=dynamodb_resource, table_name=settings.menu_items_table
        )
        self.order_repository = OrderRepository(
            dynamodb_resource=dynamodb_resource, table_name=settings.orders_table
        )
        self.image_storage = ImageStorage(settings.upload_dir)

        self.menu_service = MenuService(
            menu_repository=self.menu_repository, image_storage=self.image_storage
        )
        self.pricing_engine = OrderPricingEngine(menu_repository=self.menu_repository)
        self.order_service = OrderService(
            order_repository=self.order_repository,
            menu_repository=self.menu_repository,
            pricing_engine=self.pricing_engine,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        """Create a context connected to the configured DynamoDB."""
        return cls(settings, create_dynamodb_resource(settings))

    def startup(self) -> None:
        """Create the tables if configured to."""
        if self.settings.create_tables:
            self.menu_repository.ensure_table()
            self.order_repository.ensure_table()

        logger.info(
            f"Context started - menu items: {self.settings.menu_items_table}, "
            f"orders: {self.settings.orders_table}, uploads: {self.settings.upload_dir}"
        )

    def shutdown(self) -> None:
        """Release the DynamoDB client's connections."""
        self.dynamodb.meta.client.close()
        logger.info("Context shut down")
