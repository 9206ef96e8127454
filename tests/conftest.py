"""Shared pytest fixtures and configuration for all tests."""

import os
from collections.abc import Iterator
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import boto3
import pytest
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError
from botocore.stub import Stubber

# main.py skips building the real application in test mode
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient  # noqa: E402

from restaurant_ordering_service.config import Settings  # noqa: E402
from restaurant_ordering_service.context import AppContext  # noqa: E402
from restaurant_ordering_service.handlers.api_handler import create_app  # noqa: E402
from restaurant_ordering_service.models.menu_models import MenuItem  # noqa: E402

MENU_TABLE = "test-menu-items"
ORDERS_TABLE = "test-orders"

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def _to_attribute_values(item: dict[str, Any]) -> dict[str, Any]:
    return {name: _serializer.serialize(value) for name, value in item.items()}


def _from_attribute_values(item: dict[str, Any]) -> dict[str, Any]:
    return {name: _deserializer.deserialize(value) for name, value in item.items()}


class InMemoryTable:
    """Minimal stand-in for a boto3 DynamoDB Table with a string hash key.

    Items are kept in DynamoDB attribute-value form and pass through boto3's
    own serializer and deserializer, so number limits behave as on AWS.
    """

    def __init__(self, name: str, key_name: str) -> None:
        self.name = name
        self.key_name = key_name
        self.items: dict[str, dict[str, Any]] = {}

    def put_item(self, Item: dict[str, Any]) -> dict:  # noqa: N803
        self.items[Item[self.key_name]] = _to_attribute_values(Item)
        return {}

    def get_item(self, Key: dict[str, Any]) -> dict:  # noqa: N803
        key = Key[self.key_name]
        if key not in self.items:
            return {}
        return {"Item": _from_attribute_values(self.items[key])}

    def scan(self, **kwargs: Any) -> dict:
        return {"Items": [_from_attribute_values(item) for item in self.items.values()]}

    def update_item(self, Key: dict[str, Any], **kwargs: Any) -> dict:  # noqa: N803
        key = Key[self.key_name]
        if key not in self.items:
            raise ClientError(
                {
                    "Error": {
                        "Code": "ConditionalCheckFailedException",
                        "Message": "The conditional request failed",
                    }
                },
                "UpdateItem",
            )
        # Only "SET #status = :status" is issued by the service
        self.items[key]["status"] = _serializer.serialize(
            kwargs["ExpressionAttributeValues"][":status"]
        )
        return {"Attributes": _from_attribute_values(self.items[key])}


class InMemoryDynamoDB:
    """Minimal stand-in for a boto3 DynamoDB service resource."""

    def __init__(self) -> None:
        self.tables = {
            MENU_TABLE: InMemoryTable(MENU_TABLE, "menu_item_id"),
            ORDERS_TABLE: InMemoryTable(ORDERS_TABLE, "order_id"),
        }
        self.meta = SimpleNamespace(client=MagicMock())

    def Table(self, name: str) -> InMemoryTable:  # noqa: N802
        return self.tables[name]

    def batch_get_item(self, RequestItems: dict[str, Any]) -> dict:  # noqa: N803
        responses: dict[str, list] = {}
        for name, request in RequestItems.items():
            table = self.tables[name]
            responses[name] = [
                _from_attribute_values(table.items[key[table.key_name]])
                for key in request["Keys"]
                if key[table.key_name] in table.items
            ]
        return {"Responses": responses, "UnprocessedKeys": {}}


@pytest.fixture
def in_memory_dynamodb() -> InMemoryDynamoDB:
    """Fixture providing an empty in-memory DynamoDB."""
    return InMemoryDynamoDB()


@pytest.fixture
def stubbed_dynamodb() -> Iterator[tuple[Any, Stubber]]:
    """Fixture providing a real boto3 DynamoDB resource whose client is stubbed.

    Requests go through boto3's serialization; responses must be queued on
    the stubber in DynamoDB attribute-value form.
    """
    resource = boto3.resource(
        "dynamodb",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(resource.meta.client) as stubber:
        yield resource, stubber


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Fixture providing settings that point at test tables and a temp upload dir."""
    return Settings(
        menu_items_table=MENU_TABLE,
        orders_table=ORDERS_TABLE,
        upload_dir=str(tmp_path / "uploads"),
        environment="test",
        enable_otel=False,
    )


@pytest.fixture
def app_context(test_settings: Settings, in_memory_dynamodb: InMemoryDynamoDB) -> AppContext:
    """Fixture providing an application context backed by in-memory DynamoDB."""
    return AppContext(test_settings, in_memory_dynamodb)


@pytest.fixture
def client(app_context: AppContext) -> Iterator[TestClient]:
    """Fixture providing a test client with the application lifespan running."""
    with TestClient(create_app(app_context)) as test_client:
        yield test_client


@pytest.fixture
def burger() -> MenuItem:
    """Fixture providing a sample menu item."""
    return MenuItem(
        id="item_burger",
        name="Burger",
        description="Beef burger",
        price=Decimal("9.50"),
        image=None,
    )


@pytest.fixture
def fries() -> MenuItem:
    """Fixture providing a second sample menu item."""
    return MenuItem(
        id="item_fries",
        name="Fries",
        description="Crispy french fries",
        price=Decimal("3.25"),
        image="uploads/1718000000000.png",
    )
