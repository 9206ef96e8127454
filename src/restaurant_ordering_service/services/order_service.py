"""Order service: creation, listing and status lifecycle."""

import logging
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from restaurant_ordering_service.errors import (
    NotFoundError,
    OrderingServiceError,
    ValidationError,
)
from restaurant_ordering_service.models.order_models import (
    Order,
    OrderItemRequest,
    OrderStatusEnum,
    PopulatedOrder,
)
from restaurant_ordering_service.observability.decorators import traced
from restaurant_ordering_service.observability.metrics import (
    record_order_created,
    record_order_failure,
    record_status_update,
)
from restaurant_ordering_service.repositories.ordering_repositories import (
    MenuItemRepository,
    OrderRepository,
)
from restaurant_ordering_service.services.pricing_service import OrderPricingEngine

logger = logging.getLogger(__name__)


def parse_status(value: str | OrderStatusEnum | None) -> OrderStatusEnum:
    """Parse a requested order status.

    Args:
        value: Status as submitted

    Returns:
        OrderStatusEnum: The matching status

    Raises:
        ValidationError: If the value is missing or not a known status
    """
    if value is None:
        raise ValidationError("status is required")

    try:
        return OrderStatusEnum(value)
    except ValueError as e:
        allowed = ", ".join(status.value for status in OrderStatusEnum)
        raise ValidationError(f"Invalid status {value!r}, expected one of: {allowed}") from e


class OrderService:
    """Service for creating orders and managing their status.

    Creation prices the order once and stores the total as a snapshot.
    Listing can optionally expand line items with current menu data; that
    enrichment never touches the stored total.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        menu_repository: MenuItemRepository,
        pricing_engine: OrderPricingEngine,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for order records
            menu_repository: Repository used to expand line items
            pricing_engine: Engine that resolves and prices requested items
        """
        self.order_repository = order_repository
        self.menu_repository = menu_repository
        self.pricing_engine = pricing_engine

    @traced("create_order")
    async def create_order(self, requested_items: Sequence[OrderItemRequest]) -> Order:
        """Create a new order in Pending status.

        Args:
            requested_items: Requested (menu item id, quantity) pairs

        Returns:
            The persisted Order

        Raises:
            ValidationError: If the request is empty
            NotFoundError: If a menu item does not exist; nothing is persisted
            StorageError: If a storage call fails
        """
        try:
            pricing = await self.pricing_engine.resolve(requested_items)
        except OrderingServiceError as e:
            record_order_failure(type(e).__name__)
            raise

        order = Order(
            id=uuid.uuid4().hex,
            items=pricing.line_items,
            total_price=pricing.total_price,
            status=OrderStatusEnum.PENDING,
            created_at=datetime.now(UTC),
        )
        self.order_repository.save_order(order)

        record_order_created(order.total_price, len(order.items))
        logger.info(f"Created order {order.id} with {len(order.items)} items, total {order.total_price}")
        return order

    async def get_order(self, order_id: str) -> Order:
        """Get an order by ID.

        Raises:
            NotFoundError: If no order has this id
        """
        order = self.order_repository.get_order(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    async def list_orders(self, populate: bool = True) -> list[Order] | list[PopulatedOrder]:
        """List all orders.

        Args:
            populate: Expand line items with current menu data

        Returns:
            Stored orders, or their populated views when ``populate`` is set
        """
        orders = self.order_repository.list_orders()
        if not populate:
            return orders
        return await self.populate_orders(orders)

    async def populate_orders(self, orders: list[Order]) -> list[PopulatedOrder]:
        """Attach the current menu item data to each order's line items.

        Menu data reflects the catalog now, while each order keeps the total
        it was created with. Line items whose menu item no longer exists are
        expanded to None.

        Args:
            orders: Stored orders

        Returns:
            list: Populated orders in the same order
        """
        menu_item_ids = [line.menu_item for order in orders for line in order.items]
        menu_items = self.menu_repository.batch_get_items(menu_item_ids) if menu_item_ids else {}
        return [PopulatedOrder.from_order(order, menu_items) for order in orders]

    @traced("update_order_status")
    async def update_status(self, order_id: str, new_status: str | OrderStatusEnum | None) -> Order:
        """Overwrite the status of an existing order.

        Any status may follow any other. Line items and total are untouched.

        Args:
            order_id: Order identifier
            new_status: Requested status

        Returns:
            The updated Order

        Raises:
            ValidationError: If the status is not one of the known values
            NotFoundError: If no order has this id
            StorageError: If the update fails
        """
        status = parse_status(new_status)

        order = self.order_repository.update_status(order_id, status)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        record_status_update(status.value)
        logger.info(f"Order {order_id} moved to {status.value}")
        return order
