# Re-export all models for convenient imports
from fastfinder.models.user import User
from fastfinder.models.item import Item, ItemType, ItemCategory, ItemStatus

__all__ = [
    "User",
    "Item",
    "ItemType",
    "ItemCategory",
    "ItemStatus",
]
