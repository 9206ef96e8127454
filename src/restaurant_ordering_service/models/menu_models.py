"""Menu data models.

Menu items are stored in DynamoDB with snake_case attributes and exposed over
HTTP with the camelCase field names the ordering frontend expects.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Prices are held as Decimal for exact arithmetic but rendered as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique identifier for the menu item")
    name: str = Field(..., description="Item name", min_length=1)
    description: str = Field(..., description="Item description", min_length=1)
    price: Money = Field(..., description="Item price", ge=0)
    image: str | None = Field(None, description="Path of the uploaded item image")

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        item: dict[str, Any] = {
            "menu_item_id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
        }

        if self.image is not None:
            item["image"] = self.image

        return item

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "MenuItem":
        """Create MenuItem from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            MenuItem: Parsed model instance
        """
        return cls(
            id=item["menu_item_id"],
            name=item["name"],
            description=item["description"],
            price=Decimal(str(item["price"])),
            image=item.get("image"),
        )
