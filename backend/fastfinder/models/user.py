from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship

from fastfinder.core.database import Base
from fastfinder.core.types import GUID, generate_uuid, utcnow


class User(Base):
    """Registered account.

    A pending verification code always travels with its expiry, and the same
    holds for the reset code/token pair. ``hashed_password`` is the only form
    in which the password is ever stored.
    """
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    # Stored trimmed and lowercased
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    contact_number = Column(String(32), nullable=False)

    is_verified = Column(Boolean, default=False, nullable=False)
    verification_code = Column(String(6), nullable=True)
    verification_code_expires = Column(DateTime, nullable=True)

    # Password reset fields: a short code for the form, a long token for the emailed link
    reset_code = Column(String(6), nullable=True)
    reset_code_expires = Column(DateTime, nullable=True)
    reset_token = Column(String(64), unique=True, index=True, nullable=True)
    reset_token_expires = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    items = relationship("Item", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
