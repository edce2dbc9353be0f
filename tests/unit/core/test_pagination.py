"""Tests for the paginated list query engine."""

import pytest

from src.user_api.core.pagination import MAX_OFFSET, DataTable, PageRequest, escape_like
from src.user_api.entities.core.user import ReadUserData, UserRepository, UserTable
from src.user_api.entities.core.user.repository import ORDER_BY_COLUMNS


@pytest.fixture
def table() -> DataTable:
    return DataTable(
        model=UserTable,
        order_columns=ORDER_BY_COLUMNS,
        default_order="name",
        search_fields=("name",),
        default_limit=10,
        max_limit=100,
    )


@pytest.fixture
def seeded(make_user):
    """Five users created out of alphabetical order."""
    return [
        make_user(name, f"{name.lower()}@example.com")
        for name in ("Charlie", "alice", "Echo", "Bravo", "delta")
    ]


def names(page) -> list[str]:
    return [user.name for user in page.records]


class TestDataTable:
    def test_unknown_default_order_is_rejected(self):
        with pytest.raises(ValueError):
            DataTable(model=UserTable, order_columns=ORDER_BY_COLUMNS, default_order="email")

    @pytest.mark.parametrize(
        ("order_by", "expected"),
        [
            ("id", "id"),
            ("name", "name"),
            ("createdAt", "created_at"),
            ("updatedAt", "updated_at"),
            ("email", "name"),
            ("name; DROP TABLE users", "name"),
            ("", "name"),
        ],
    )
    def test_resolve_order_uses_whitelist(self, table, order_by, expected):
        assert table.resolve_order(order_by) == expected

    @pytest.mark.parametrize(
        ("sort_by", "expected"),
        [("asc", "asc"), ("desc", "desc"), ("DESC", "asc"), ("sideways", "asc"), ("", "asc")],
    )
    def test_resolve_sort_falls_back_to_asc(self, sort_by, expected):
        assert DataTable.resolve_sort(sort_by) == expected

    @pytest.mark.parametrize(("page", "expected"), [(-3, 1), (0, 1), (1, 1), (7, 7)])
    def test_resolve_page(self, page, expected):
        assert DataTable.resolve_page(page) == expected

    @pytest.mark.parametrize(("limit", "expected"), [(-1, 10), (0, 10), (5, 5), (100, 100), (500, 100)])
    def test_resolve_limit(self, table, limit, expected):
        assert table.resolve_limit(limit) == expected

    @pytest.mark.parametrize(
        ("page", "limit", "expected"),
        [(0, 10, 0), (3, 10, 20), (2**63 - 1, 100, MAX_OFFSET)],
    )
    def test_offset_is_capped(self, table, page, limit, expected):
        assert table.offset(page, limit) == expected

    def test_escape_like(self):
        assert escape_like("50%_off\\") == "50\\%\\_off\\\\"

    def test_search_clause_absent_without_term(self, table):
        assert table.search_clause("") is None

    def test_count_statement_ignores_paging(self, table):
        sql = str(table.count_statement(PageRequest(page=3, limit=2, search="a")))

        assert "count" in sql.lower()
        assert "LIMIT" not in sql
        assert "lower" in sql.lower() or "like" in sql.lower()


class TestUserPagination:
    def test_default_order_is_name_ascending(self, user_repository, seeded):
        page = user_repository.read(ReadUserData())

        assert names(page) == ["Bravo", "Charlie", "Echo", "alice", "delta"]
        assert page.total == 5

    def test_unknown_order_by_matches_name(self, user_repository, seeded):
        by_name = user_repository.read(ReadUserData(order_by="name"))
        unknown = user_repository.read(ReadUserData(order_by="email"))

        assert names(unknown) == names(by_name)

    def test_unknown_sort_by_matches_asc(self, user_repository, seeded):
        asc = user_repository.read(ReadUserData(order_by="createdAt", sort_by="asc"))
        unknown = user_repository.read(ReadUserData(order_by="createdAt", sort_by="up"))

        assert names(unknown) == names(asc)

    def test_order_by_created_at_descending(self, user_repository, seeded):
        page = user_repository.read(ReadUserData(order_by="createdAt", sort_by="desc"))

        assert [user.id for user in page.records] == [user.id for user in reversed(seeded)]

    def test_pages_do_not_overlap(self, user_repository, seeded):
        first = user_repository.read(ReadUserData(page=1, limit=2))
        second = user_repository.read(ReadUserData(page=2, limit=2))
        third = user_repository.read(ReadUserData(page=3, limit=2))

        seen = names(first) + names(second) + names(third)
        assert len(seen) == 5
        assert len(set(seen)) == 5
        assert first.total == second.total == third.total == 5

    def test_next_page_true_only_for_full_page(self, user_repository, seeded):
        assert user_repository.read(ReadUserData(page=1, limit=2)).next_page is True
        assert user_repository.read(ReadUserData(page=3, limit=2)).next_page is False
        assert user_repository.read(ReadUserData(limit=5)).next_page is True
        assert user_repository.read(ReadUserData(limit=6)).next_page is False

    def test_page_zero_is_first_page(self, user_repository, seeded):
        assert names(user_repository.read(ReadUserData(page=0, limit=2))) == names(
            user_repository.read(ReadUserData(page=1, limit=2))
        )

    def test_search_is_case_insensitive_and_counted(self, user_repository, seeded):
        page = user_repository.read(ReadUserData(search="LT"))

        assert names(page) == ["delta"]
        assert page.total == 1

    def test_search_wildcards_match_literally(self, user_repository, make_user):
        make_user("100% Real", "real@example.com")
        make_user("1000 Fake", "fake@example.com")
        make_user("under_score", "under@example.com")
        make_user("underXscore", "x@example.com")

        assert names(user_repository.read(ReadUserData(search="0%"))) == ["100% Real"]
        assert names(user_repository.read(ReadUserData(search="r_s"))) == ["under_score"]

    def test_configured_limits_apply(self, session, time_zone, seeded):
        repository = UserRepository(session, time_zone, default_limit=2, max_limit=3)

        assert len(repository.read(ReadUserData()).records) == 2
        assert len(repository.read(ReadUserData(limit=50)).records) == 3

    def test_page_beyond_last_row_is_empty(self, user_repository, seeded):
        page = user_repository.read(ReadUserData(page=2**63 - 1, limit=100))

        assert page.records == []
        assert page.total == 5
        assert page.next_page is False
