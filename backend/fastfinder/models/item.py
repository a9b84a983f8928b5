from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from fastfinder.core.database import Base
from fastfinder.core.types import GUID, generate_uuid, utcnow


class ItemType(str, enum.Enum):
    """Whether the reporter lost or found the item"""
    LOST = "lost"
    FOUND = "found"


class ItemCategory(str, enum.Enum):
    """Item categories"""
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    ACCESSORIES = "Accessories"
    DOCUMENTS = "Documents"
    OTHER = "Other"


class ItemStatus(str, enum.Enum):
    """Item status"""
    OPEN = "open"
    CLOSED = "closed"
    CLAIMED = "claimed"


def _enum_values(enum_cls):
    # Persist the wire values ("lost", "Electronics") rather than member names
    return [member.value for member in enum_cls]


class Item(Base):
    """Lost or found report, owned by exactly one user"""
    __tablename__ = "items"

    __table_args__ = (
        Index('ix_items_type_status', 'type', 'status'),
        Index('ix_items_created_at', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(ItemCategory, values_callable=_enum_values), nullable=False)
    item_type = Column("type", SQLEnum(ItemType, values_callable=_enum_values), nullable=False)
    location = Column(String(255), nullable=False)
    date = Column(DateTime, nullable=False)  # when the item was lost or found
    image_url = Column(Text, nullable=True)
    contact_info = Column(String(255), nullable=True)
    status = Column(
        SQLEnum(ItemStatus, values_callable=_enum_values),
        default=ItemStatus.OPEN,
        nullable=False,
    )

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="items")

    def __repr__(self):
        return f"<Item {self.item_type.value if self.item_type else '?'}: {self.title}>"
