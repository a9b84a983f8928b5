"""
Credential Store
================
Persistence of user accounts. Owns password hashing: callers hand in raw
passwords and only the bcrypt hash ever reaches the database.
"""

from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fastfinder.core.exceptions import DuplicateEmailError
from fastfinder.core.security import get_password_hash, verify_password
from fastfinder.core.validation import normalize_email
from fastfinder.models.user import User


class CredentialStore:
    """User records behind an explicit session, one store per request"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        name: str,
        email: str,
        raw_password: str,
        contact_number: str,
        **fields: Any,
    ) -> User:
        """Insert an unverified user; DuplicateEmailError if the email is taken"""
        email = normalize_email(email)
        if await self.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        user = User(
            name=name.strip(),
            email=email,
            hashed_password=get_password_hash(raw_password),
            contact_number=contact_number.strip(),
            is_verified=False,
            **fields,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise DuplicateEmailError(email)

        await self.db.refresh(user)
        return user

    async def find_by_email(self, email: Optional[str]) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        result = await self.db.execute(select(User).where(User.id == str(user_id)))
        return result.scalar_one_or_none()

    async def find_by_reset_token(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        result = await self.db.execute(select(User).where(User.reset_token == token))
        return result.scalar_one_or_none()

    @staticmethod
    def verify_password(user: User, raw_password: Optional[str]) -> bool:
        """Compare through bcrypt, never against the raw string"""
        if raw_password is None:
            return False
        return verify_password(raw_password, user.hashed_password)

    async def update(self, user: User, **fields: Any) -> User:
        """
        Apply field-level updates. A ``password`` entry is hashed and stored
        as ``hashed_password``; ``email`` is normalized.
        """
        if "password" in fields:
            fields["hashed_password"] = get_password_hash(fields.pop("password"))
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])

        for key, value in fields.items():
            if not hasattr(User, key):
                raise AttributeError(f"User has no field '{key}'")
            setattr(user, key, value)

        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateEmailError(user.email)
        return user
