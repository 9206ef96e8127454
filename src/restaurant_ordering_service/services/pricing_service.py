"""Order pricing: resolves requested line items against the menu catalog."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, DecimalException, localcontext

from boto3.dynamodb.types import DYNAMODB_CONTEXT

from restaurant_ordering_service.errors import NotFoundError, ValidationError
from restaurant_ordering_service.models.order_models import OrderItemRequest, OrderLineItem
from restaurant_ordering_service.repositories.ordering_repositories import MenuItemRepository

logger = logging.getLogger(__name__)


@dataclass
class PricingResult:
    """Resolved line items and their total.

    Attributes:
        line_items: Line items in request order
        total_price: Sum of price times quantity over all line items
    """

    line_items: list[OrderLineItem]
    total_price: Decimal


class OrderPricingEngine:
    """Resolves menu item references and computes order totals.

    All references are fetched with one batched read; each menu item is
    resolved once and its price reused for the total. The total is computed in
    DynamoDB's decimal context, so it is either exact and storable or rejected.
    """

    def __init__(self, menu_repository: MenuItemRepository) -> None:
        """Initialize the pricing engine.

        Args:
            menu_repository: Repository used to look up menu items
        """
        self.menu_repository = menu_repository

    async def resolve(self, requested_items: Sequence[OrderItemRequest]) -> PricingResult:
        """Resolve requested items and compute the total price.

        Args:
            requested_items: Requested (menu item id, quantity) pairs

        Returns:
            PricingResult with line items in request order

        Raises:
            ValidationError: If no items were requested, or the total cannot be
                stored exactly
            NotFoundError: If any menu item id does not resolve
            StorageError: If the catalog lookup fails
        """
        if not requested_items:
            raise ValidationError("Order must contain at least one item")

        menu_items = self.menu_repository.batch_get_items(
            [requested.menu_item_id for requested in requested_items]
        )

        line_items: list[OrderLineItem] = []
        prices: list[Decimal] = []
        for requested in requested_items:
            menu_item = menu_items.get(requested.menu_item_id)
            if menu_item is None:
                logger.warning(f"Order references unknown menu item {requested.menu_item_id}")
                raise NotFoundError(f"Menu item {requested.menu_item_id} not found")

            line_items.append(OrderLineItem(menu_item=menu_item.id, quantity=requested.quantity))
            prices.append(menu_item.price)

        try:
            with localcontext(DYNAMODB_CONTEXT):
                total = Decimal("0")
                for line, price in zip(line_items, prices):
                    total += price * line.quantity
        except DecimalException as e:
            logger.warning(f"Order total exceeds DynamoDB number precision: {e!r}")
            raise ValidationError(
                "Order total cannot be represented exactly "
                "(more than 38 significant digits or out of range)"
            ) from e

        return PricingResult(line_items=line_items, total_price=total)
