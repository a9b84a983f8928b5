"""
Unit Tests for the credential store
"""
import pytest

from fastfinder.core.exceptions import DuplicateEmailError
from fastfinder.services.credential_store import CredentialStore


@pytest.fixture
def store(db_session) -> CredentialStore:
    return CredentialStore(db_session)


async def create_alice(store: CredentialStore, email: str = "Alice@X.com"):
    return await store.create(
        name=" Alice ",
        email=email,
        raw_password="Passw0rd",
        contact_number="03001234567",
    )


class TestCreate:

    @pytest.mark.asyncio
    async def test_new_user_is_unverified(self, store):
        user = await create_alice(store)

        assert user.id
        assert user.is_verified is False
        assert user.name == "Alice"

    @pytest.mark.asyncio
    async def test_email_is_normalized(self, store):
        user = await create_alice(store)

        assert user.email == "alice@x.com"

    @pytest.mark.asyncio
    async def test_password_only_stored_hashed(self, store):
        user = await create_alice(store)

        assert user.hashed_password != "Passw0rd"
        assert "Passw0rd" not in user.hashed_password

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected_case_insensitively(self, store):
        await create_alice(store)

        with pytest.raises(DuplicateEmailError) as exc_info:
            await create_alice(store, email=" ALICE@x.com")

        assert exc_info.value.message == "Email already in use"


class TestLookup:

    @pytest.mark.asyncio
    async def test_find_by_email(self, store):
        created = await create_alice(store)

        assert (await store.find_by_email("alice@X.COM")).id == created.id
        assert await store.find_by_email("bob@x.com") is None
        assert await store.find_by_email(None) is None

    @pytest.mark.asyncio
    async def test_find_by_id(self, store):
        created = await create_alice(store)

        assert (await store.find_by_id(created.id)).email == "alice@x.com"
        assert await store.find_by_id("not-a-user") is None


class TestPasswords:

    @pytest.mark.asyncio
    async def test_verify_password(self, store):
        user = await create_alice(store)

        assert store.verify_password(user, "Passw0rd") is True
        assert store.verify_password(user, "passw0rd") is False
        assert store.verify_password(user, None) is False

    @pytest.mark.asyncio
    async def test_update_rehashes_password(self, store):
        user = await create_alice(store)
        old_hash = user.hashed_password

        await store.update(user, password="N3wPassword")

        assert user.hashed_password != old_hash
        assert store.verify_password(user, "N3wPassword") is True
        assert store.verify_password(user, "Passw0rd") is False

    @pytest.mark.asyncio
    async def test_update_plain_fields(self, store):
        user = await create_alice(store)

        await store.update(user, contact_number="+92 321 7654321", is_verified=True)

        reloaded = await store.find_by_id(user.id)
        assert reloaded.contact_number == "+92 321 7654321"
        assert reloaded.is_verified is True

    @pytest.mark.asyncio
    async def test_update_unknown_field(self, store):
        user = await create_alice(store)

        with pytest.raises(AttributeError):
            await store.update(user, favourite_colour="blue")
