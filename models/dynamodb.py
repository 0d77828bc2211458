"""DynamoDB data models for the kefir tracker."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for models exchanged with the mobile client.

    Fields are snake_case in Python and camelCase on the wire and in the
    table. Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DynamoDBItem(CamelModel):
    """Base class for all DynamoDB items."""

    PK: str = Field(alias="PK")
    SK: str = Field(alias="SK")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_item(self) -> Dict[str, Any]:
        """Convert to the attribute map written to the table."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_item(cls, item: Optional[Dict[str, Any]]):
        """Create an instance from a stored item, or None for a missing item."""
        if not item:
            return None
        return cls.model_validate(item)
