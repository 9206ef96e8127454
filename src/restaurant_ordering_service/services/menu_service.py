"""Menu catalog service for adding and listing menu items."""

import logging
import uuid
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Any

from boto3.dynamodb.types import DYNAMODB_CONTEXT

from restaurant_ordering_service.errors import ValidationError
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.observability.decorators import traced
from restaurant_ordering_service.observability.metrics import record_menu_item_created
from restaurant_ordering_service.repositories.ordering_repositories import MenuItemRepository
from restaurant_ordering_service.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)


def _require_text(field: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def parse_price(value: Any) -> Decimal:
    """Parse a submitted price into a non-negative Decimal.

    Args:
        value: Price as submitted (form text or a number)

    Returns:
        Decimal: The parsed price

    Raises:
        ValidationError: If the price is missing, not a number, negative, not
            finite, or not exactly representable as a DynamoDB number
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("price is required")

    try:
        price = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"price must be a number, got {value!r}") from e

    if not price.is_finite() or price < 0:
        raise ValidationError(f"price must be a non-negative number, got {value!r}")

    # DynamoDB numbers hold at most 38 significant digits within 1e-130..1e+125
    try:
        return DYNAMODB_CONTEXT.create_decimal(price)
    except DecimalException as e:
        raise ValidationError(
            f"price must have at most 38 significant digits and a DynamoDB-supported "
            f"magnitude, got {value!r}"
        ) from e


class MenuService:
    """Service for the menu catalog.

    Validates submitted menu items, stores an optional image and writes the
    record. Menu items are never updated or deleted by this service.
    """

    def __init__(self, menu_repository: MenuItemRepository, image_storage: ImageStorage) -> None:
        """Initialize the MenuService.

        Args:
            menu_repository: Repository for menu item records
            image_storage: Storage for uploaded item images
        """
        self.menu_repository = menu_repository
        self.image_storage = image_storage

    @traced("add_menu_item")
    async def add_item(
        self,
        name: str | None,
        description: str | None,
        price: Any,
        image_filename: str | None = None,
        image_content: bytes | None = None,
    ) -> MenuItem:
        """Add a menu item to the catalog.

        Fields are validated before the image is written, so a rejected
        request leaves no file behind.

        Args:
            name: Item name
            description: Item description
            price: Item price as submitted
            image_filename: Original name of the uploaded image, if any
            image_content: Bytes of the uploaded image, if any

        Returns:
            The created MenuItem

        Raises:
            ValidationError: If a required field is missing or malformed
            StorageError: If the image or the record cannot be stored
        """
        name = _require_text("name", name)
        description = _require_text("description", description)
        parsed_price = parse_price(price)

        image = None
        if image_content is not None:
            image = self.image_storage.save(image_filename, image_content)

        item = MenuItem(
            id=uuid.uuid4().hex,
            name=name,
            description=description,
            price=parsed_price,
            image=image,
        )
        self.menu_repository.save_item(item)

        record_menu_item_created()
        logger.info(f"Added menu item {item.id} ({item.name}) at {item.price}")
        return item

    async def list_items(self) -> list[MenuItem]:
        """List every menu item in storage order."""
        return self.menu_repository.list_items()
