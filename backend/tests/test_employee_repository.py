"""
Employee Directory Backend - Employee Repository Tests
========================================================

What:  Tests for EmployeeRepository against a real in-memory SQLite database.
Why:   The search/filter/pagination composition and the unique-email
       detection only mean something against the real engine.

What we test:
    ✅ create/get round trip, server-side timestamps, ids never reused
    ✅ duplicate email raises UniqueConstraintViolation, session stays usable
    ✅ partial update touches only named fields and refreshes updated_at
    ✅ list ordering, substring search, position filter, limit/offset
    ✅ count agrees with list for the same filters
"""

import pytest
from sqlalchemy import text

from employee_directory.exceptions import UniqueConstraintViolation
from employee_directory.repositories.employee_repository import SQLITE_MAX_INTEGER, EmployeeRepository


async def _add(repository: EmployeeRepository, name: str, email: str, position: str = "Developer",
               phone: str = "5551234567") -> int:
    return await repository.create(name=name, email=email, position=position, phone=phone)


async def _seed(repository: EmployeeRepository) -> dict:
    """Three developers and one designer, inserted oldest first."""
    return {
        "alice": await _add(repository, "Alice Smith", "alice@example.com", "Developer", "5550001111"),
        "bob": await _add(repository, "Bob Jones", "bob@corp.io", "Designer", "5550002222"),
        "carol": await _add(repository, "Carol White", "carol@example.com", "Developer", "5550003333"),
        "dave": await _add(repository, "Dave Brown", "dave@example.com", "Senior Developer", "5550004444"),
    }


class TestCreateAndGet:

    @pytest.mark.asyncio
    async def test_create_returns_id_and_row_is_readable(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com")

        employee = await repository.get(employee_id)

        assert employee is not None
        assert employee.id == employee_id
        assert employee.name == "John Doe"
        assert employee.email == "john@example.com"
        assert employee.position == "Developer"
        assert employee.phone == "5551234567"
        assert employee.created_at is not None
        assert employee.created_at == employee.updated_at

    @pytest.mark.asyncio
    async def test_values_are_stored_as_given(self, repository):
        """Normalization belongs to the service; the repository stores verbatim."""
        employee_id = await _add(repository, "  Jane  ", "Jane@Example.COM")

        employee = await repository.get(employee_id)
        assert employee.name == "  Jane  "
        assert employee.email == "Jane@Example.COM"

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, repository):
        assert await repository.get(999) is None

    @pytest.mark.asyncio
    async def test_ids_are_not_reused_after_delete(self, repository):
        first = await _add(repository, "First", "first@example.com")
        assert await repository.delete(first) is True

        second = await _add(repository, "Second", "second@example.com")
        assert second > first


class TestUniqueEmail:

    @pytest.mark.asyncio
    async def test_duplicate_email_raises_unique_violation(self, repository):
        await _add(repository, "John Doe", "john@example.com")

        with pytest.raises(UniqueConstraintViolation) as exc_info:
            await _add(repository, "Johnny", "john@example.com")

        assert exc_info.value.involves("email")
        assert exc_info.value.table == "employees"
        assert exc_info.value.constraint == "email"

    @pytest.mark.asyncio
    async def test_session_usable_after_rejected_write(self, repository):
        await _add(repository, "John Doe", "john@example.com")
        with pytest.raises(UniqueConstraintViolation):
            await _add(repository, "Johnny", "john@example.com")

        other_id = await _add(repository, "Jane Roe", "jane@example.com")

        assert await repository.count() == 2
        assert (await repository.get(other_id)).name == "Jane Roe"

    @pytest.mark.asyncio
    async def test_update_to_taken_email_leaves_rows_unchanged(self, repository):
        john = await _add(repository, "John Doe", "john@example.com")
        jane = await _add(repository, "Jane Roe", "jane@example.com")

        with pytest.raises(UniqueConstraintViolation):
            await repository.update(jane, {"name": "Jane X", "email": "john@example.com"})

        assert (await repository.get(jane)).name == "Jane Roe"
        assert (await repository.get(jane)).email == "jane@example.com"
        assert (await repository.get(john)).email == "john@example.com"


class TestUpdate:

    @pytest.mark.asyncio
    async def test_only_named_fields_change(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com", "Developer", "5551234567")

        assert await repository.update(employee_id, {"position": "Lead"}) is True

        employee = await repository.get(employee_id)
        assert employee.position == "Lead"
        assert employee.name == "John Doe"
        assert employee.email == "john@example.com"
        assert employee.phone == "5551234567"

    @pytest.mark.asyncio
    async def test_update_refreshes_updated_at_only(self, repository, db_session):
        employee_id = await _add(repository, "John Doe", "john@example.com")
        await db_session.execute(
            text(
                "UPDATE employees SET created_at = '2000-01-01 00:00:00', "
                "updated_at = '2000-01-01 00:00:00' WHERE id = :id"
            ),
            {"id": employee_id},
        )
        await db_session.commit()

        await repository.update(employee_id, {"name": "John Q. Doe"})

        employee = await repository.get(employee_id)
        assert employee.created_at.year == 2000
        assert employee.updated_at.year > 2000

    @pytest.mark.asyncio
    async def test_none_values_count_as_not_named(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com")

        assert await repository.update(employee_id, {"name": None, "phone": "5559998888"}) is True

        employee = await repository.get(employee_id)
        assert employee.name == "John Doe"
        assert employee.phone == "5559998888"

    @pytest.mark.asyncio
    async def test_nothing_named_returns_false(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com")

        assert await repository.update(employee_id, {}) is False
        assert await repository.update(employee_id, {"name": None}) is False

    @pytest.mark.asyncio
    async def test_missing_id_returns_false(self, repository):
        assert await repository.update(404, {"name": "Ghost"}) is False

    @pytest.mark.asyncio
    async def test_unknown_field_is_rejected(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com")

        with pytest.raises(ValueError, match="created_at"):
            await repository.update(employee_id, {"created_at": "2020-01-01"})


class TestOutOfRangeIds:
    """Ids beyond SQLite's 64-bit INTEGER can never exist."""

    HUGE_ID = 99999999999999999999

    @pytest.mark.asyncio
    async def test_get_returns_none(self, repository):
        assert await repository.get(self.HUGE_ID) is None

    @pytest.mark.asyncio
    async def test_update_and_delete_return_false(self, repository):
        await _add(repository, "John Doe", "john@example.com")

        assert await repository.update(self.HUGE_ID, {"name": "Ghost"}) is False
        assert await repository.delete(self.HUGE_ID) is False
        assert await repository.count() == 1

    @pytest.mark.asyncio
    async def test_largest_valid_id_is_just_missing(self, repository):
        assert await repository.get(SQLITE_MAX_INTEGER) is None


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_twice(self, repository):
        employee_id = await _add(repository, "John Doe", "john@example.com")

        assert await repository.delete(employee_id) is True
        assert await repository.delete(employee_id) is False
        assert await repository.get(employee_id) is None


class TestListAndCount:

    @pytest.mark.asyncio
    async def test_newest_first(self, repository):
        ids = await _seed(repository)

        employees = await repository.list()

        assert [e.id for e in employees] == [ids["dave"], ids["carol"], ids["bob"], ids["alice"]]

    @pytest.mark.asyncio
    async def test_query_matches_name_email_or_phone(self, repository):
        ids = await _seed(repository)

        by_name = await repository.list(query="smith")
        by_email = await repository.list(query="corp.io")
        by_phone = await repository.list(query="0003")

        assert [e.id for e in by_name] == [ids["alice"]]
        assert [e.id for e in by_email] == [ids["bob"]]
        assert [e.id for e in by_phone] == [ids["carol"]]

    @pytest.mark.asyncio
    async def test_query_is_case_insensitive(self, repository):
        ids = await _seed(repository)

        employees = await repository.list(query="ALICE")

        assert [e.id for e in employees] == [ids["alice"]]

    @pytest.mark.asyncio
    async def test_like_wildcards_match_literally(self, repository):
        literal = await _add(repository, "Under Score", "a_b@example.com")
        await _add(repository, "No Score", "axb@example.com")

        employees = await repository.list(query="a_b")

        assert [e.id for e in employees] == [literal]
        assert await repository.list(query="%") == []

    @pytest.mark.asyncio
    async def test_position_is_exact_match(self, repository):
        ids = await _seed(repository)

        employees = await repository.list(position="Developer")

        assert {e.id for e in employees} == {ids["alice"], ids["carol"]}

    @pytest.mark.asyncio
    async def test_query_and_position_combine_with_and(self, repository):
        ids = await _seed(repository)

        employees = await repository.list(query="example.com", position="Developer")

        assert [e.id for e in employees] == [ids["carol"], ids["alice"]]

    @pytest.mark.asyncio
    async def test_limit_and_offset_window(self, repository):
        ids = await _seed(repository)

        page = await repository.list(limit=2, offset=1)

        assert [e.id for e in page] == [ids["carol"], ids["bob"]]

    @pytest.mark.asyncio
    async def test_single_row_pages_cover_both_rows_without_overlap(self, repository):
        older = await _add(repository, "Older", "older@example.com")
        newer = await _add(repository, "Newer", "newer@example.com")

        first_page = await repository.list(limit=1, offset=0)
        second_page = await repository.list(limit=1, offset=1)

        assert [e.id for e in first_page] == [newer]
        assert [e.id for e in second_page] == [older]

    @pytest.mark.asyncio
    async def test_offset_without_limit(self, repository):
        ids = await _seed(repository)

        page = await repository.list(offset=3)

        assert [e.id for e in page] == [ids["alice"]]

    @pytest.mark.asyncio
    async def test_zero_limit_returns_nothing_and_zero_offset_skips_nothing(self, repository):
        await _seed(repository)

        assert await repository.list(limit=0) == []
        assert len(await repository.list(offset=0)) == 4

    @pytest.mark.asyncio
    async def test_negative_window_rejected(self, repository):
        with pytest.raises(ValueError):
            await repository.list(limit=-1)
        with pytest.raises(ValueError):
            await repository.list(offset=-5)
        with pytest.raises(ValueError):
            await repository.list(limit=SQLITE_MAX_INTEGER + 1)

    @pytest.mark.asyncio
    async def test_count_matches_unwindowed_list(self, repository):
        await _seed(repository)

        for query, position in [(None, None), ("example", None), (None, "Developer"), ("zzz", None)]:
            rows = await repository.list(query=query, position=position)
            assert await repository.count(query=query, position=position) == len(rows)

    @pytest.mark.asyncio
    async def test_empty_table(self, repository):
        assert await repository.list() == []
        assert await repository.count() == 0
