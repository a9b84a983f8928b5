"""
Item Service
============
Lost/found reports: listing with search and filters, reporting, owner-only
updates, status changes and deletion. Returns ``Result`` like the auth
service does.
"""

from typing import Optional

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fastfinder.core.exceptions import AuthorizationError, FinderError, ItemNotFoundError
from fastfinder.core.logging_config import logger
from fastfinder.core.result import Err, ErrorKind, Ok, Result
from fastfinder.models.item import Item, ItemCategory, ItemStatus, ItemType
from fastfinder.models.user import User
from fastfinder.schemas.item import ItemCreate, ItemResponse, ItemStatusUpdate, ItemUpdate
from fastfinder.utils.pagination import DEFAULT_PAGE_SIZE, paginate, pagination_meta

REQUIRED_FIELDS = ("title", "description", "type", "category", "location", "date")
LIKE_ESCAPE = "\\"

# Schema field -> model attribute, for the fields an owner may edit
EDITABLE_FIELDS = {
    "title": "title",
    "description": "description",
    "type": "item_type",
    "category": "category",
    "location": "location",
    "date": "date",
    "image_url": "image_url",
    "contact_info": "contact_info",
    "status": "status",
}


class ItemService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_items(
        self,
        q: Optional[str] = None,
        item_type: Optional[ItemType] = None,
        category: Optional[ItemCategory] = None,
        status: Optional[ItemStatus] = None,
        reported_by: Optional[str] = None,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> Result:
        """Newest first; ``q`` is a case-insensitive substring over the text fields"""
        query = select(Item)

        if q and q.strip():
            pattern = f"%{_escape_like(q.strip())}%"
            query = query.where(or_(
                Item.title.ilike(pattern, escape=LIKE_ESCAPE),
                Item.description.ilike(pattern, escape=LIKE_ESCAPE),
                cast(Item.category, String).ilike(pattern, escape=LIKE_ESCAPE),
                Item.location.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if item_type is not None:
            query = query.where(Item.item_type == item_type)
        if category is not None:
            query = query.where(Item.category == category)
        if status is not None:
            query = query.where(Item.status == status)
        if reported_by:
            query = query.where(Item.user_id == reported_by)

        query = query.order_by(Item.created_at.desc(), Item.id)
        page_info = await paginate(self.db, query, page, page_size)

        return Ok({
            "items": [ItemResponse.from_item(item).to_wire() for item in page_info["items"]],
            **pagination_meta(page_info),
        })

    async def list_mine(self, user: User, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Result:
        return await self.list_items(reported_by=user.id, page=page, page_size=page_size)

    async def get_item(self, item_id: str) -> Result:
        item = await self._load(item_id, with_reporter=True)
        if item is None:
            return Err.from_error(ItemNotFoundError(item_id))
        return Ok({"item": ItemResponse.from_item(item, with_reporter=True).to_wire()})

    async def create_item(self, user: User, data: ItemCreate) -> Result:
        missing = [name for name in REQUIRED_FIELDS if not _present(getattr(data, name))]
        if missing:
            return Err(ErrorKind.VALIDATION, "Please fill in all required fields", {"missing": missing})

        item = Item(
            user_id=user.id,
            title=data.title.strip(),
            description=data.description.strip(),
            item_type=data.type,
            category=data.category,
            location=data.location.strip(),
            date=data.date,
            image_url=data.image_url,
            contact_info=(data.contact_info or "").strip() or user.contact_number,
            status=ItemStatus.OPEN,
        )
        self.db.add(item)
        await self.db.flush()
        await self.db.refresh(item)

        logger.info(f"[Items] {user.email} reported {item.item_type.value} item {item.id}")
        return Ok({"item": ItemResponse.from_item(item).to_wire()}, "Item reported successfully")

    async def update_item(self, user: User, item_id: str, data: ItemUpdate) -> Result:
        try:
            item = await self._owned(user, item_id, "update")
        except FinderError as e:
            return Err.from_error(e)

        changes = data.model_dump(exclude_unset=True)
        # Required columns cannot be blanked out
        for field_name, value in changes.items():
            if (field_name in REQUIRED_FIELDS or field_name == "status") and not _present(value):
                return Err(ErrorKind.VALIDATION, f"{field_name} cannot be empty")

        for field_name, value in changes.items():
            setattr(item, EDITABLE_FIELDS[field_name], value)

        await self.db.flush()
        await self.db.refresh(item)
        logger.info(f"[Items] {user.email} updated item {item.id}: {sorted(changes)}")
        return Ok({"item": ItemResponse.from_item(item).to_wire()}, "Item updated successfully")

    async def update_status(self, user: User, item_id: str, data: ItemStatusUpdate) -> Result:
        if data.status is None:
            return Err(ErrorKind.VALIDATION, "Status is required")
        try:
            item = await self._owned(user, item_id, "update")
        except FinderError as e:
            return Err.from_error(e)

        previous = item.status
        item.status = data.status
        await self.db.flush()
        await self.db.refresh(item)
        logger.info(f"[Items] {item.id} status {previous.value} -> {item.status.value}")
        return Ok({"item": ItemResponse.from_item(item).to_wire()}, "Item status updated successfully")

    async def delete_item(self, user: User, item_id: str) -> Result:
        try:
            item = await self._owned(user, item_id, "delete")
        except FinderError as e:
            return Err.from_error(e)

        await self.db.delete(item)
        await self.db.flush()
        logger.info(f"[Items] {user.email} deleted item {item_id}")
        return Ok(message="Item deleted successfully")

    # ------------------------------------------------------------------

    async def _load(self, item_id: str, with_reporter: bool = False) -> Optional[Item]:
        query = select(Item).where(Item.id == item_id)
        if with_reporter:
            query = query.options(selectinload(Item.user))
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _owned(self, user: User, item_id: str, action: str) -> Item:
        item = await self._load(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.user_id != user.id:
            logger.warning(f"[Items] {user.email} tried to {action} item {item_id} owned by {item.user_id}")
            raise AuthorizationError(f"You are not authorized to {action} this item")
        return item


def _escape_like(text: str) -> str:
    """Search terms match literally; % and _ are not wildcards"""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )

def _present(value) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None
