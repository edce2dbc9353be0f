"""Paginated list queries with whitelisted ordering and free-text search.

``DataTable`` turns a ``PageRequest`` into two independent statements over one
table: a fetch statement (filtered, searched, ordered, offset and limited) and
a count statement over the same filters. Only whitelisted order keys ever reach
SQL; anything else falls back to the table's default order.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import ColumnElement, Select, func, or_
from sqlalchemy.orm.interfaces import LoaderOption
from sqlmodel import Session, SQLModel, select

T = TypeVar("T")

SORT_DIRECTIONS = ("asc", "desc")
DEFAULT_SORT = "asc"
LIKE_ESCAPE = "\\"
# Signed 64-bit ceiling shared by SQLite and PostgreSQL for OFFSET
MAX_OFFSET = 2**63 - 1


class PaginatorResponse(BaseModel, Generic[T]):
    """One page of records plus paging metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    records: list[T] = Field(default_factory=list)
    total: int = Field(default=0, description="Matching rows; 0 when not calculated")
    next_page: bool = Field(
        default=False, description="True when the page came back full"
    )


@dataclass(frozen=True)
class PageRequest:
    """Typed paging parameters. Zero values mean "use the default"."""

    page: int = 0
    limit: int = 0
    order_by: str = ""
    sort_by: str = ""
    search: str = ""
    disable_calculate_total: bool = False


@dataclass(frozen=True)
class PageResult:
    rows: list[Any]
    total: int
    next_page: bool
    page: int
    limit: int


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


@dataclass(frozen=True)
class DataTable:
    """Query builder for one table.

    Args:
        model: Table model to query.
        order_columns: Whitelist mapping request order keys to column names.
        default_order: Key of ``order_columns`` used for unknown order keys.
        search_fields: Column names matched against the search term.
        default_limit: Page size used when the request gives none.
        max_limit: Upper bound for the page size.
    """

    model: type[SQLModel]
    order_columns: Mapping[str, str]
    default_order: str
    search_fields: Sequence[str] = field(default_factory=tuple)
    default_limit: int = 10
    max_limit: int = 100

    def __post_init__(self) -> None:
        if self.default_order not in self.order_columns:
            raise ValueError(f"default order '{self.default_order}' is not whitelisted")

    def resolve_order(self, order_by: str) -> str:
        return self.order_columns.get(order_by, self.order_columns[self.default_order])

    @staticmethod
    def resolve_sort(sort_by: str) -> str:
        return sort_by if sort_by in SORT_DIRECTIONS else DEFAULT_SORT

    @staticmethod
    def resolve_page(page: int) -> int:
        return page if page > 0 else 1

    def resolve_limit(self, limit: int) -> int:
        if limit <= 0:
            return self.default_limit
        return min(limit, self.max_limit)

    def offset(self, page: int, limit: int) -> int:
        return min((self.resolve_page(page) - 1) * limit, MAX_OFFSET)

    def search_clause(self, term: str) -> ColumnElement[bool] | None:
        if not term or not self.search_fields:
            return None
        pattern = f"%{escape_like(term)}%"
        return or_(
            *(
                getattr(self.model, name).ilike(pattern, escape=LIKE_ESCAPE)
                for name in self.search_fields
            )
        )

    def _where(
        self, request: PageRequest, filters: Iterable[ColumnElement[bool]]
    ) -> list[ColumnElement[bool]]:
        clauses = list(filters)
        search = self.search_clause(request.search)
        if search is not None:
            clauses.append(search)
        return clauses

    def fetch_statement(
        self,
        request: PageRequest,
        filters: Iterable[ColumnElement[bool]] = (),
        options: Iterable[LoaderOption] = (),
    ) -> Select:
        page = self.resolve_page(request.page)
        limit = self.resolve_limit(request.limit)
        column = getattr(self.model, self.resolve_order(request.order_by))
        ordering = column.desc() if self.resolve_sort(request.sort_by) == "desc" else column.asc()

        statement = select(self.model).where(*self._where(request, filters))
        for option in options:
            statement = statement.options(option)
        # Primary key breaks ties so pages never overlap
        return (
            statement.order_by(ordering, self.model.id)
            .offset(self.offset(page, limit))
            .limit(limit)
        )

    def count_statement(
        self, request: PageRequest, filters: Iterable[ColumnElement[bool]] = ()
    ) -> Select:
        return (
            select(func.count())
            .select_from(self.model)
            .where(*self._where(request, filters))
        )

    def run(
        self,
        session: Session,
        request: PageRequest,
        filters: Iterable[ColumnElement[bool]] = (),
        options: Iterable[LoaderOption] = (),
    ) -> PageResult:
        """Execute the fetch and (unless disabled) the count statement.

        The two statements are independent reads; ``total`` may lag ``rows``
        under concurrent writes.
        """
        filters = list(filters)
        limit = self.resolve_limit(request.limit)
        rows = list(session.exec(self.fetch_statement(request, filters, options)).all())

        total = 0
        if not request.disable_calculate_total:
            total = session.exec(self.count_statement(request, filters)).one()

        return PageResult(
            rows=rows,
            total=total,
            next_page=len(rows) >= limit,
            page=self.resolve_page(request.page),
            limit=limit,
        )
