"""User repository: transactional create/read/update/delete of users and emails."""

import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from src.user_api.core.errors import (
    FAILED_TO_CREATE_EMAIL,
    FAILED_TO_CREATE_USER,
    FAILED_TO_DELETE_EMAIL_DATA,
    FAILED_TO_DELETE_USER_DATA,
    FAILED_TO_READ_EMAIL_DATA,
    FAILED_TO_READ_USER_DATA,
    FAILED_TO_UPDATE_USER_DATA,
    IdGenerationError,
    RecordNotFoundError,
    RepositoryError,
)
from src.user_api.core.pagination import DataTable, PageRequest, PaginatorResponse
from src.user_api.entities.core.email.table import EmailTable
from src.user_api.entities.core.user.entity import User
from src.user_api.entities.core.user.table import UserTable

ORDER_BY_COLUMNS = {
    "id": "id",
    "name": "name",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
SEARCH_FIELDS = ("name",)


@dataclass(frozen=True)
class CreateUserData:
    name: str
    emails: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReadUserData(PageRequest):
    id: str = ""


@dataclass(frozen=True)
class UpdateUserData:
    id: str
    name: str = ""
    emails: Sequence[str] = field(default_factory=tuple)


class UserRepository:
    """Data-access layer for users and their emails.

    Every mutation runs in one transaction on the given session: it is
    committed when all steps succeed and rolled back on the first failure,
    which is raised as a ``RepositoryError`` carrying the step code.
    """

    def __init__(
        self,
        session: Session,
        time_zone: tzinfo,
        *,
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> None:
        self._session = session
        self._time_zone = time_zone
        self._table = DataTable(
            model=UserTable,
            order_columns=ORDER_BY_COLUMNS,
            default_order="name",
            search_fields=SEARCH_FIELDS,
            default_limit=default_limit,
            max_limit=max_limit,
        )

    def _now(self) -> datetime:
        return datetime.now(self._time_zone)

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    @staticmethod
    def _new_id(tag: str) -> str:
        try:
            return str(uuid.uuid4())
        except (OSError, NotImplementedError) as e:
            logger.bind(tag=tag, error=str(e)).error("failed to generate uuid")
            raise IdGenerationError(str(e)) from e

    def _flush(self, tag: str, message: str, code: str) -> None:
        """Write pending changes, turning storage failures into ``code``.

        A write that matched no rows surfaces here as ``StaleDataError``.
        """
        try:
            self._session.flush()
        except SQLAlchemyError as e:
            logger.bind(tag=tag, error=str(e)).error(message)
            raise RepositoryError(code, f"{message}: {e}") from e

    def _to_entity(self, row: UserTable) -> User:
        return User.model_validate(row, context={"tz": self._time_zone})

    def _get_row(self, user_id: str) -> UserTable | None:
        statement = select(UserTable).where(
            UserTable.id == user_id, UserTable.deleted_at.is_(None)
        )
        return self._session.exec(statement).first()

    def _add_emails(self, user: UserTable, addresses: Sequence[str], tag: str) -> None:
        for position, address in enumerate(addresses):
            now = self._now()
            email = EmailTable(
                id=self._new_id(tag + "01"),
                user_id=user.id,
                email=address,
                position=position,
                created_at=now,
                updated_at=now,
            )
            user.emails.append(email)
            self._flush(tag + "02", "failed to create email", FAILED_TO_CREATE_EMAIL)

    def create(self, data: CreateUserData) -> User:
        """Persist a user and its emails in one transaction."""
        tag = "user_api.entities.core.user.repository.UserRepository.create."

        with self._transaction():
            now = self._now()
            user = UserTable(
                id=self._new_id(tag + "01"),
                name=data.name,
                created_at=now,
                updated_at=now,
            )
            self._session.add(user)
            self._flush(tag + "02", "failed to create user", FAILED_TO_CREATE_USER)
            self._add_emails(user, data.emails, tag + "03.")

        logger.bind(user_id=user.id, emails=len(data.emails)).debug("user created")
        return self._to_entity(user)

    def read(self, data: ReadUserData) -> PaginatorResponse[User]:
        """Return one page of users, each with its emails.

        When ``data.id`` is set only that user can match.
        """
        filters = [UserTable.deleted_at.is_(None)]
        if data.id:
            filters.append(UserTable.id == data.id)

        result = self._table.run(
            self._session,
            data,
            filters=filters,
            options=[selectinload(UserTable.emails)],
        )

        return PaginatorResponse[User](
            records=[self._to_entity(row) for row in result.rows],
            total=result.total,
            next_page=result.next_page,
        )

    def update(self, data: UpdateUserData) -> User:
        """Rename the user and/or replace its whole email set.

        With no emails supplied the existing set is kept; ``updated_at`` is
        refreshed either way. A user without emails is not an error.
        """
        tag = "user_api.entities.core.user.repository.UserRepository.update."

        with self._transaction():
            user = self._get_row(data.id)
            if user is None:
                logger.bind(tag=tag + "01", error="Failed to Read User Data").error(
                    "failed to read user data"
                )
                raise RecordNotFoundError(FAILED_TO_READ_USER_DATA)

            if data.name:
                user.name = data.name

            if data.emails:
                removed = len(user.emails)
                user.emails.clear()
                self._flush(
                    tag + "02", "failed to delete email data", FAILED_TO_DELETE_EMAIL_DATA
                )
                logger.bind(user_id=user.id, removed=removed).debug("emails removed")
                self._add_emails(user, data.emails, tag + "03.")
            else:
                try:
                    self._session.refresh(user, attribute_names=["emails"])
                except SQLAlchemyError as e:
                    logger.bind(tag=tag + "04", error=str(e)).error(
                        "failed to read email data"
                    )
                    raise RepositoryError(FAILED_TO_READ_EMAIL_DATA, str(e)) from e

            user.updated_at = self._now()
            self._session.add(user)
            self._flush(
                tag + "05", "failed to update user data", FAILED_TO_UPDATE_USER_DATA
            )

        return self._to_entity(user)

    def delete(self, user_id: str) -> None:
        """Hard-delete the user and all of its emails in one transaction."""
        tag = "user_api.entities.core.user.repository.UserRepository.delete."

        with self._transaction():
            user = self._get_row(user_id)
            if user is None:
                logger.bind(tag=tag + "01", error="Failed To Read User Data").error(
                    "failed to read user data"
                )
                raise RecordNotFoundError(FAILED_TO_READ_USER_DATA)

            removed = len(user.emails)
            user.emails.clear()
            self._flush(
                tag + "02", "failed to delete email data", FAILED_TO_DELETE_EMAIL_DATA
            )

            self._session.delete(user)
            self._flush(
                tag + "03", "failed to delete user data", FAILED_TO_DELETE_USER_DATA
            )

        logger.bind(user_id=user_id, emails=removed).debug("user deleted")
