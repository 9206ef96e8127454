"""Custom metrics for the ordering service."""

from decimal import Decimal

from opentelemetry import metrics

meter = metrics.get_meter("ordering-svc")

orders_created_counter = meter.create_counter(
    name="orders_created_total",
    description="Total number of orders created",
    unit="1",
)

order_failure_counter = meter.create_counter(
    name="order_creation_failure_total",
    description="Total number of rejected order creation requests by reason",
    unit="1",
)

order_total_histogram = meter.create_histogram(
    name="order_total_price",
    description="Total price of created orders",
    unit="1",
)

status_update_counter = meter.create_counter(
    name="order_status_updates_total",
    description="Total number of order status updates by new status",
    unit="1",
)

menu_items_created_counter = meter.create_counter(
    name="menu_items_created_total",
    description="Total number of menu items added to the catalog",
    unit="1",
)


def record_order_created(total_price: Decimal, line_count: int) -> None:
    """Record a successfully created order.

    Args:
        total_price: Snapshot total of the order
        line_count: Number of line items in the order
    """
    orders_created_counter.add(1, {"line_count": line_count})
    order_total_histogram.record(float(total_price))


def record_order_failure(reason: str) -> None:
    """Record a rejected order creation.

    Args:
        reason: Error type that rejected the order (e.g. "NotFoundError")
    """
    order_failure_counter.add(1, {"reason": reason})


def record_status_update(status: str) -> None:
    """Record an order status update.

    Args:
        status: The status the order was moved to
    """
    status_update_counter.add(1, {"status": status})


def record_menu_item_created() -> None:
    """Record a menu item added to the catalog."""
    menu_items_created_counter.add(1)
