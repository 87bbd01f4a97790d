import asyncio
import logging

import pytest

from psu_catalog.exceptions.base import (
    AlreadyExistsError,
    DatabaseError,
    ErrorKind,
    InvalidParamError,
    NotFoundError,
)
from psu_catalog.models.user import User
from psu_catalog.repositories.base_repository import BaseRepository
from psu_catalog.repositories.query import equals, like, order_by, order_by_desc, paginate


@pytest.mark.asyncio
class TestBaseRepositoryCreate:

    async def test_create_success(self, base_repo, sample_user_data, caplog):
        """
        Behavior:
            - Create a user through the generic repository.
            - The returned entity carries the generated id and server defaults.

        Importance:
            - Confirms add() / flush() / refresh() return a fully populated model
              without committing (the caller owns the transaction).
        """
        # Act
        user = await base_repo.create(User(**sample_user_data))

        # Assert: generated integer id and stored fields
        assert isinstance(user.id, int)
        assert user.username == sample_user_data["username"]
        assert user.email == sample_user_data["email"]

        # Assert: defaults filled in by the database
        assert user.status == 1
        assert user.created_at is not None
        assert user.updated_at is not None

        # Assert: a structured success event was logged
        records = [r for r in caplog.records if r.getMessage() == "repo.create.success"]
        assert records and records[-1].model == "User"

    async def test_create_duplicate_username_raises_already_exists(self, base_repo, create_user):
        """
        Behavior:
            - Insert two users with the same username.
            - Expect AlreadyExistsError naming the offending column.

        Importance:
            - The unique index is the authority for duplicates; the raw driver
              error must never reach callers.
        """
        # Arrange
        await create_user(username="duplicate")

        # Act & Assert
        with pytest.raises(AlreadyExistsError) as exc_info:
            await base_repo.create(User(username="duplicate", hashed_password="x"))

        err = exc_info.value
        assert err.kind is ErrorKind.ALREADY_EXISTS
        assert err.message == "user already exists"
        assert err.fields == ["username"]
        assert err.__cause__ is not None

    async def test_create_duplicate_email_raises_already_exists(self, base_repo, create_user):
        await create_user(email="taken@example.com")

        with pytest.raises(AlreadyExistsError) as exc_info:
            await base_repo.create(User(username="someone_else", email="taken@example.com", hashed_password="x"))

        assert exc_info.value.fields == ["email"]

    async def test_null_emails_never_collide(self, create_user):
        first = await create_user(email=None)
        second = await create_user(email=None)

        assert first.id != second.id

    async def test_create_missing_required_field_raises_database_error(self, base_repo):
        """
        Behavior:
            - Insert a user without a username (NOT NULL column).
            - Expect DatabaseError listing the missing column.

        Importance:
            - Only unique violations are client conflicts; other constraint
              failures are server-side errors.
        """
        with pytest.raises(DatabaseError) as exc_info:
            await base_repo.create(User(hashed_password="x"))

        assert exc_info.value.fields == ["username"]
        assert "username" in exc_info.value.message


@pytest.mark.asyncio
class TestBaseRepositoryRead:

    async def test_get_by_id_returns_entity(self, base_repo, created_user):
        fetched = await base_repo.get_by_id(created_user.id)

        assert fetched.id == created_user.id
        assert fetched.username == created_user.username

    async def test_get_by_id_missing_raises_not_found(self, base_repo):
        with pytest.raises(NotFoundError) as exc_info:
            await base_repo.get_by_id(999_999)

        assert exc_info.value.message == "user not found"
        assert exc_info.value.http_status() == 404

    async def test_find_one_returns_first_match(self, base_repo, multiple_users):
        found = await base_repo.find_one(equals("username", multiple_users[1].username))
        assert found.id == multiple_users[1].id

    async def test_find_one_without_match_raises_not_found(self, base_repo, multiple_users):
        with pytest.raises(NotFoundError):
            await base_repo.find_one(equals("username", "nobody"))

    async def test_get_all_without_match_returns_empty_list(self, base_repo, multiple_users):
        assert await base_repo.get_all(equals("username", "nobody")) == []

    async def test_get_all_orders_and_paginates(self, base_repo, multiple_users):
        """
        Behavior:
            - Newest-first ordering with a 2-per-page window.

        Importance:
            - The page window applies after ordering, never before filtering.
        """
        ids_desc = sorted((u.id for u in multiple_users), reverse=True)

        page_1 = await base_repo.get_all(order_by_desc("id"), paginate(1, 2))
        page_2 = await base_repo.get_all(order_by_desc("id"), paginate(2, 2))

        assert [u.id for u in page_1] == ids_desc[:2]
        assert [u.id for u in page_2] == ids_desc[2:]

    async def test_count_ignores_page_window(self, base_repo, multiple_users):
        """
        Behavior:
            - count() with a pagination filter still reports every match.

        Importance:
            - List endpoints report the total across all pages.
        """
        total = await base_repo.count(like("username", "user_"), order_by("id"), paginate(1, 1))
        assert total == 3

    async def test_count_and_exists(self, base_repo, multiple_users):
        assert await base_repo.count() == 3
        assert await base_repo.exists(equals("username", multiple_users[0].username)) is True
        assert await base_repo.exists(equals("username", "nobody")) is False


@pytest.mark.asyncio
class TestBaseRepositoryUpdate:

    async def test_update_writes_only_given_fields(self, base_repo, created_user):
        original_email = created_user.email

        await base_repo.update(created_user, {"nickname": "Tester"})

        assert created_user.nickname == "Tester"
        assert created_user.email == original_email
        assert created_user.updated_at is not None

    async def test_update_can_write_falsy_values(self, base_repo, created_user):
        await base_repo.update(created_user, {"status": 0})

        fetched = await base_repo.get_by_id(created_user.id)
        assert fetched.status == 0

    async def test_update_with_empty_map_is_noop(self, base_repo, created_user, caplog):
        caplog.set_level(logging.DEBUG, logger="psu_catalog.repositories.base_repository")

        await base_repo.update(created_user, {})

        assert any(r.getMessage() == "repo.update.noop" for r in caplog.records)

    @pytest.mark.parametrize("fields", [{"no_such_column": 1}, {"id": 42}])
    async def test_update_rejects_unknown_or_primary_key_fields(self, base_repo, created_user, fields):
        """
        Behavior:
            - Unknown columns and the primary key are refused before any SQL runs.

        Importance:
            - A typo must fail loudly instead of silently updating nothing.
        """
        with pytest.raises(InvalidParamError) as exc_info:
            await base_repo.update(created_user, fields)

        assert exc_info.value.fields == list(fields)

    async def test_update_duplicate_raises_already_exists(self, base_repo, create_user):
        await create_user(email="first@example.com")
        second = await create_user(email="second@example.com")

        with pytest.raises(AlreadyExistsError) as exc_info:
            await base_repo.update(second, {"email": "first@example.com"})

        assert exc_info.value.fields == ["email"]

    async def test_update_by_id_changes_row(self, base_repo, created_user):
        await base_repo.update_by_id(created_user.id, {"phone": "555-0100"})

        fetched = await base_repo.get_by_id(created_user.id)
        assert fetched.phone == "555-0100"

    async def test_update_by_id_missing_raises_not_found(self, base_repo):
        with pytest.raises(NotFoundError):
            await base_repo.update_by_id(999_999, {"nickname": "ghost"})

    async def test_exists_by_id(self, base_repo, created_user):
        assert await base_repo.exists_by_id(created_user.id) is True
        assert await base_repo.exists_by_id(999_999) is False


@pytest.mark.asyncio
class TestBaseRepositoryDelete:

    async def test_delete_removes_row(self, base_repo, created_user):
        await base_repo.delete(created_user.id)

        with pytest.raises(NotFoundError):
            await base_repo.get_by_id(created_user.id)

    async def test_delete_missing_raises_not_found_every_time(self, base_repo, created_user):
        """
        Behavior:
            - Deleting the same id twice: the second attempt is NotFound.

        Importance:
            - Delete is not idempotent at the API level; clients learn the row is gone.
        """
        await base_repo.delete(created_user.id)

        with pytest.raises(NotFoundError):
            await base_repo.delete(created_user.id)
        with pytest.raises(NotFoundError):
            await base_repo.delete(created_user.id)


@pytest.mark.asyncio
class TestBaseRepositoryTransaction:

    async def test_transaction_returns_result_and_keeps_work(self, base_repo):
        async def work():
            a = await base_repo.create(User(username="tx_a", hashed_password="x"))
            b = await base_repo.create(User(username="tx_b", hashed_password="x"))
            return a.id, b.id

        ids = await base_repo.transaction(work)

        assert len(ids) == 2
        assert await base_repo.count() == 2

    async def test_transaction_rolls_back_on_error(self, base_repo):
        async def work():
            await base_repo.create(User(username="tx_rolled_back", hashed_password="x"))
            raise ValueError("abort")

        with pytest.raises(ValueError, match="abort"):
            await base_repo.transaction(work)

        assert await base_repo.count() == 0

    async def test_nested_transaction_only_discards_inner_work(self, base_repo, created_user):
        """
        Behavior:
            - The session already has an open transaction (created_user).
            - A failing transaction block uses a SAVEPOINT and only its own
              work is discarded.

        Importance:
            - Service code can run an atomic step inside a request-wide
              unit of work without losing earlier changes.
        """
        username = created_user.username

        async def work():
            await base_repo.create(User(username="tx_inner", hashed_password="x"))
            raise RuntimeError("inner failure")

        with pytest.raises(RuntimeError):
            await base_repo.transaction(work)

        assert await base_repo.exists(equals("username", username)) is True
        assert await base_repo.exists(equals("username", "tx_inner")) is False

    async def test_nested_transaction_keeps_outer_work_on_repository_error(self, base_repo, created_user):
        """
        Behavior:
            - Inside a SAVEPOINT, a repository call hits a unique constraint.
            - AlreadyExistsError propagates, the inner insert is discarded and
              the row flushed before the block survives.

        Importance:
            - Storage errors go through the repository error handler, which
              must not roll back the whole session while a savepoint is open.
        """
        username = created_user.username

        async def work():
            await base_repo.create(User(username="tx_inner_ok", hashed_password="x"))
            await base_repo.create(User(username=username, hashed_password="x"))

        with pytest.raises(AlreadyExistsError):
            await base_repo.transaction(work)

        assert await base_repo.count() == 1
        assert await base_repo.exists(equals("username", username)) is True
        assert await base_repo.exists(equals("username", "tx_inner_ok")) is False


@pytest.mark.asyncio
class TestBaseRepositoryFailures:

    async def test_query_timeout_surfaces_as_database_error(self, db_session, monkeypatch):
        """
        Behavior:
            - A statement that outlives the repository deadline fails with
              DatabaseError whose cause is the timeout.

        Importance:
            - A hung database must not hang the request forever.
        """
        repo = BaseRepository(User, db_session, query_timeout=0.05)

        async def slow_execute(*args, **kwargs):
            await asyncio.sleep(1)

        monkeypatch.setattr(db_session, "execute", slow_execute)

        with pytest.raises(DatabaseError) as exc_info:
            await repo.get_by_id(1)

        assert "timed out" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    async def test_unexpected_driver_error_is_wrapped(self, base_repo, db_session, monkeypatch):
        async def broken_execute(*args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(db_session, "execute", broken_execute)

        with pytest.raises(DatabaseError) as exc_info:
            await base_repo.count()

        err = exc_info.value
        assert err.kind is ErrorKind.DATABASE_ERROR
        assert "connection reset" not in err.message
        assert isinstance(err.__cause__, RuntimeError)
