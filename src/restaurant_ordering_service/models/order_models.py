"""Order models.

An ``Order`` is what gets persisted: line items reference menu items by id
and ``total_price`` is the snapshot computed at creation. ``PopulatedOrder``
is the read-time view where each line item carries the menu item's current
data; it never recomputes the total.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from restaurant_ordering_service.models.menu_models import MenuItem, Money

# Upper bound on a requested line quantity
MAX_LINE_QUANTITY = 10_000


class OrderStatusEnum(str, Enum):
    """Enumeration of order status values.

    Any status may follow any other; no transition table is enforced.
    """

    PENDING = "Pending"
    PREPARING = "Preparing"
    READY = "Ready"
    COMPLETED = "Completed"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderLineItem(_CamelModel):
    """A (menu item reference, quantity) pair embedded in an order."""

    menu_item: str = Field(..., description="Identifier of the referenced menu item")
    quantity: int = Field(..., description="Number of units ordered", gt=0)


class Order(_CamelModel):
    """Persisted order record."""

    id: str = Field(..., description="Unique order identifier")
    items: list[OrderLineItem] = Field(..., description="Line items in request order")
    total_price: Money = Field(..., description="Total computed at creation", ge=0)
    status: OrderStatusEnum = Field(default=OrderStatusEnum.PENDING, description="Order status")
    created_at: datetime = Field(..., description="Order creation timestamp")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "order_id": self.id,
            "items": [
                {"menu_item_id": line.menu_item, "quantity": line.quantity} for line in self.items
            ],
            "total_price": self.total_price,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance
        """
        return cls(
            id=item["order_id"],
            items=[
                OrderLineItem(menu_item=line["menu_item_id"], quantity=int(line["quantity"]))
                for line in item.get("items", [])
            ],
            total_price=item["total_price"],
            status=OrderStatusEnum(item["status"]),
            created_at=datetime.fromisoformat(item["created_at"]),
        )


class PopulatedLineItem(_CamelModel):
    """Line item with the referenced menu item expanded.

    ``menu_item`` is None when the referenced item no longer exists.
    """

    menu_item: MenuItem | None
    quantity: int


class PopulatedOrder(_CamelModel):
    """Order as returned by the list endpoint, line items expanded."""

    id: str
    items: list[PopulatedLineItem]
    total_price: Money
    status: OrderStatusEnum
    created_at: datetime

    @classmethod
    def from_order(cls, order: Order, menu_items: dict[str, MenuItem]) -> "PopulatedOrder":
        """Expand an order's line items from a menu item lookup table.

        Args:
            order: Stored order
            menu_items: Current menu items keyed by id

        Returns:
            PopulatedOrder: The order with current menu data attached
        """
        return cls(
            id=order.id,
            items=[
                PopulatedLineItem(menu_item=menu_items.get(line.menu_item), quantity=line.quantity)
                for line in order.items
            ],
            total_price=order.total_price,
            status=order.status,
            created_at=order.created_at,
        )


class OrderItemRequest(_CamelModel):
    """One requested line in a create-order body."""

    menu_item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, le=MAX_LINE_QUANTITY)


class CreateOrderRequest(_CamelModel):
    """Body of POST /api/orders."""

    items: list[OrderItemRequest]


class UpdateOrderStatusRequest(_CamelModel):
    """Body of PATCH /api/orders/{id}.

    The status is checked by the service so that an unknown value surfaces as
    a ValidationError with a readable message.
    """

    status: str | None = None
