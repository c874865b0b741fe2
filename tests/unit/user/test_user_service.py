"""Tests for the credential store."""

from datetime import timedelta
from uuid import uuid4

import pytest

from folio.core.modules.user.models import Role
from folio.errors import DuplicateEmailError, StoreTimeoutError
from folio.utils import now


async def create(core, email="a@x.com", full_name="A B"):
    users = core.services.user
    async with core.database.transaction() as conn:
        user = await users.create_user(conn, email, "$2b$04$hash", full_name)
        await users.create_profile(conn, user.id, full_name)
        await users.create_default_role(conn, user.id)
    return user


class TestFindByEmail:
    """Tests for looking up users by email."""

    async def test_missing(self, core):
        """Test that an unknown email returns None."""
        assert await core.services.user.find_by_email("nobody@x.com") is None

    async def test_found(self, core):
        """Test that a stored user is found by email."""
        user = await create(core)
        found = await core.services.user.find_by_email("a@x.com")
        assert found is not None
        assert found.id == user.id
        assert found.full_name == "A B"

    async def test_email_match_is_case_sensitive(self, core):
        """Test that lookup does not fold email case."""
        await create(core, email="a@x.com")
        assert await core.services.user.find_by_email("A@X.com") is None


class TestCreateUser:
    """Tests for writing a user with profile and role."""

    async def test_writes_user_profile_and_reader_role(self, core, fake_pool):
        """Test that the user, profile and reader role rows are all written."""
        user = await create(core)
        assert [row["email"] for row in fake_pool.tables["auth_users"]] == ["a@x.com"]
        assert [row["id"] for row in fake_pool.tables["profiles"]] == [user.id]
        assert [(row["user_id"], row["role"]) for row in fake_pool.tables["user_roles"]] == [(user.id, "reader")]

    async def test_unique_violation_becomes_duplicate_email(self, core):
        """Test that the unique email constraint raises DuplicateEmailError."""
        await create(core)
        with pytest.raises(DuplicateEmailError):
            await create(core)

    async def test_same_email_different_case_is_allowed(self, core, fake_pool):
        """Test that emails differing only in case are distinct users."""
        await create(core, email="a@x.com")
        await create(core, email="A@x.com")
        assert len(fake_pool.tables["auth_users"]) == 2


class TestFindUserWithRole:
    """Tests for loading a user together with their role."""

    async def test_unknown_user(self, core):
        """Test that an unknown user ID returns None."""
        assert await core.services.user.find_user_with_role(uuid4()) is None

    async def test_default_role_row(self, core):
        """Test that a new user comes back with the reader role."""
        user = await create(core)
        found = await core.services.user.find_user_with_role(user.id)
        assert found is not None
        assert found[0].id == user.id
        assert found[1] == Role.READER

    async def test_no_role_row_returns_none_without_inserting(self, core, fake_pool):
        """Test that a missing role row gives None and writes nothing."""
        user = await create(core)
        fake_pool.tables["user_roles"].clear()
        found = await core.services.user.find_user_with_role(user.id)
        assert found is not None
        assert found[1] is None
        assert fake_pool.tables["user_roles"] == []

    async def test_latest_role_row_wins(self, core, fake_pool):
        """Test that the most recently created role row is used."""
        user = await create(core)
        fake_pool.tables["user_roles"].append({"user_id": user.id, "role": "admin", "created_at": now() + timedelta(seconds=1)})
        found = await core.services.user.find_user_with_role(user.id)
        assert found is not None
        assert found[1] == Role.ADMIN


class TestConnectionScope:
    """Tests for pool connection handling."""

    async def test_connections_are_returned(self, core, fake_pool):
        """Test that every acquired connection is released."""
        await create(core)
        await core.services.user.find_by_email("a@x.com")
        assert fake_pool.acquired == fake_pool.released

    async def test_connection_returned_on_failure(self, core, fake_pool):
        """Test that a connection is released when a write fails."""
        await create(core)
        with pytest.raises(DuplicateEmailError):
            await create(core)
        assert fake_pool.acquired == fake_pool.released

    async def test_pool_timeout(self, core, fake_pool):
        """Test that waiting too long for a connection raises StoreTimeoutError."""
        fake_pool.stalled = True
        with pytest.raises(StoreTimeoutError):
            await core.services.user.find_by_email("a@x.com")
