"""DynamoDB repository classes for menu items and orders.

Lookups that find nothing return None (or leave the id out of a batch
result). Failed DynamoDB calls are logged and raised as StorageError so the
request boundary can turn them into an error response.

Numbers boto3 cannot serialize exactly (more than 38 significant digits or
outside DynamoDB's range) are rejected as ValidationError before any write.
"""

import logging
from decimal import DecimalException

from botocore.exceptions import ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from restaurant_ordering_service.errors import StorageError, ValidationError
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.models.order_models import Order, OrderStatusEnum

logger = logging.getLogger(__name__)

# DynamoDB BatchGetItem accepts at most 100 keys per request
BATCH_GET_LIMIT = 100


def ensure_table(dynamodb_resource: DynamoDBServiceResource, table_name: str, key_name: str) -> None:
    """Create a table with a single string hash key if it does not exist.

    Used for local development against DynamoDB Local; deployed tables are
    provisioned outside the service.

    Args:
        dynamodb_resource: Boto3 DynamoDB resource
        table_name: Name of the table
        key_name: Name of the partition key attribute

    Raises:
        StorageError: If the table cannot be described or created
    """
    client = dynamodb_resource.meta.client
    try:
        client.describe_table(TableName=table_name)
        return
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
            logger.error(f"Failed to describe table {table_name}: {e}")
            raise StorageError(f"Failed to describe table {table_name}") from e

    try:
        table = dynamodb_resource.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": key_name, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": key_name, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
    except ClientError as e:
        logger.error(f"Failed to create table {table_name}: {e}")
        raise StorageError(f"Failed to create table {table_name}") from e

    logger.info(f"Created DynamoDB table {table_name}")


def _scan_all(table: Table) -> list[dict]:
    """Scan every page of a table."""
    response = table.scan()
    items = list(response.get("Items", []))

    while "LastEvaluatedKey" in response:
        response = table.scan(ExclusiveStartKey=response["LastEvaluatedKey"])
        items.extend(response.get("Items", []))

    return items


class MenuItemRepository:
    """Repository for menu item records.

    Manages menu items in DynamoDB with menu_item_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def ensure_table(self) -> None:
        """Create the menu items table if it is missing."""
        ensure_table(self.dynamodb, self.table_name, "menu_item_id")

    def save_item(self, item: MenuItem) -> None:
        """Save a menu item.

        Args:
            item: MenuItem to save

        Raises:
            ValidationError: If a number in the item cannot be stored exactly
            StorageError: If the write fails
        """
        try:
            self.table.put_item(Item=item.to_dynamodb_item())
        except DecimalException as e:
            logger.warning(f"Menu item {item.id} has a number DynamoDB cannot store: {e!r}")
            raise ValidationError(
                f"Menu item {item.id} has a number DynamoDB cannot store exactly"
            ) from e
        except ClientError as e:
            logger.error(f"Failed to save menu item: {e}")
            raise StorageError(f"Failed to save menu item: {e}") from e

    def get_item(self, menu_item_id: str) -> MenuItem | None:
        """Retrieve a menu item by ID.

        Args:
            menu_item_id: Menu item identifier

        Returns:
            MenuItem if found, None otherwise

        Raises:
            StorageError: If the read fails
        """
        try:
            response = self.table.get_item(Key={"menu_item_id": menu_item_id})
        except ClientError as e:
            logger.error(f"Failed to get menu item: {e}")
            raise StorageError(f"Failed to get menu item: {e}") from e

        if "Item" not in response:
            return None

        return MenuItem.from_dynamodb_item(response["Item"])

    def batch_get_items(self, menu_item_ids: list[str]) -> dict[str, MenuItem]:
        """Retrieve several menu items in as few round trips as possible.

        Args:
            menu_item_ids: Menu item identifiers, duplicates allowed

        Returns:
            dict: Found menu items keyed by id; missing ids are absent

        Raises:
            StorageError: If a batch read fails
        """
        unique_ids = list(dict.fromkeys(menu_item_ids))
        found: dict[str, MenuItem] = {}

        for start in range(0, len(unique_ids), BATCH_GET_LIMIT):
            chunk = unique_ids[start : start + BATCH_GET_LIMIT]
            request = {self.table_name: {"Keys": [{"menu_item_id": i} for i in chunk]}}

            while request:
                try:
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                except ClientError as e:
                    logger.error(f"Failed to batch get menu items: {e}")
                    raise StorageError(f"Failed to batch get menu items: {e}") from e

                for raw in response.get("Responses", {}).get(self.table_name, []):
                    item = MenuItem.from_dynamodb_item(raw)
                    found[item.id] = item

                request = response.get("UnprocessedKeys") or {}

        return found

    def list_items(self) -> list[MenuItem]:
        """List all menu items in storage order.

        Returns:
            list: List of MenuItem objects (empty list if none exist)

        Raises:
            StorageError: If the scan fails
        """
        try:
            raw_items = _scan_all(self.table)
        except ClientError as e:
            logger.error(f"Failed to list menu items: {e}")
            raise StorageError(f"Failed to list menu items: {e}") from e

        return [MenuItem.from_dynamodb_item(item) for item in raw_items]


class OrderRepository:
    """Repository for order records.

    Manages orders in DynamoDB with order_id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def ensure_table(self) -> None:
        """Create the orders table if it is missing."""
        ensure_table(self.dynamodb, self.table_name, "order_id")

    def save_order(self, order: Order) -> None:
        """Save a new order.

        Args:
            order: Order to save

        Raises:
            ValidationError: If a number in the order cannot be stored exactly
            StorageError: If the write fails
        """
        try:
            self.table.put_item(Item=order.to_dynamodb_item())
        except DecimalException as e:
            logger.warning(f"Order {order.id} has a number DynamoDB cannot store: {e!r}")
            raise ValidationError(
                f"Order {order.id} has a number DynamoDB cannot store exactly"
            ) from e
        except ClientError as e:
            logger.error(f"Failed to save order: {e}")
            raise StorageError(f"Failed to save order: {e}") from e

    def get_order(self, order_id: str) -> Order | None:
        """Retrieve an order by ID.

        Args:
            order_id: Order identifier

        Returns:
            Order if found, None otherwise

        Raises:
            StorageError: If the read fails
        """
        try:
            response = self.table.get_item(Key={"order_id": order_id})
        except ClientError as e:
            logger.error(f"Failed to get order: {e}")
            raise StorageError(f"Failed to get order: {e}") from e

        if "Item" not in response:
            return None

        return Order.from_dynamodb_item(response["Item"])

    def list_orders(self) -> list[Order]:
        """List all orders in storage order.

        Returns:
            list: List of Order objects (empty list if none exist)

        Raises:
            StorageError: If the scan fails
        """
        try:
            raw_orders = _scan_all(self.table)
        except ClientError as e:
            logger.error(f"Failed to list orders: {e}")
            raise StorageError(f"Failed to list orders: {e}") from e

        return [Order.from_dynamodb_item(item) for item in raw_orders]

    def update_status(self, order_id: str, status: OrderStatusEnum) -> Order | None:
        """Overwrite the status of an existing order.

        The update is conditional on the order existing, so a missing id never
        creates a partial record.

        Args:
            order_id: Order identifier
            status: New status

        Returns:
            The updated Order, or None if no order has this id

        Raises:
            StorageError: If the update fails for any other reason
        """
        try:
            response = self.table.update_item(
                Key={"order_id": order_id},
                UpdateExpression="SET #status = :status",
                ConditionExpression="attribute_exists(order_id)",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues={":status": status.value},
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return None
            logger.error(f"Failed to update order status: {e}")
            raise StorageError(f"Failed to update order status: {e}") from e

        return Order.from_dynamodb_item(response["Attributes"])
