from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime, timezone

from fastfinder.models.item import Item, ItemType, ItemCategory, ItemStatus
from fastfinder.schemas.auth import CamelModel, CamelResponse


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # DateTime columns hold naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class ItemCreate(CamelModel):
    # Required fields are checked by the item service so the message matches the form
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    type: Optional[ItemType] = None
    category: Optional[ItemCategory] = None
    location: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime] = None
    image_url: Optional[str] = None
    contact_info: Optional[str] = Field(None, max_length=255)

    normalize_date = field_validator("date")(_naive_utc)


class ItemUpdate(CamelModel):
    """Partial update; owner and id are not updatable"""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    type: Optional[ItemType] = None
    category: Optional[ItemCategory] = None
    location: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime] = None
    image_url: Optional[str] = None
    contact_info: Optional[str] = Field(None, max_length=255)
    status: Optional[ItemStatus] = None

    normalize_date = field_validator("date")(_naive_utc)


class ItemStatusUpdate(CamelModel):
    status: Optional[ItemStatus] = None


class Reporter(CamelResponse):
    id: str
    name: str
    email: str
    contact_number: str


class ItemResponse(CamelResponse):
    id: str
    title: str
    description: str
    type: ItemType
    category: ItemCategory
    location: str
    date: datetime
    image_url: Optional[str] = None
    contact_info: Optional[str] = None
    status: ItemStatus
    reported_by: str
    reporter: Optional[Reporter] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: Item, with_reporter: bool = False) -> "ItemResponse":
        return cls(
            id=item.id,
            title=item.title,
            description=item.description,
            type=item.item_type,
            category=item.category,
            location=item.location,
            date=item.date,
            image_url=item.image_url,
            contact_info=item.contact_info,
            status=item.status,
            reported_by=item.user_id,
            reporter=Reporter.model_validate(item.user) if with_reporter and item.user else None,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
