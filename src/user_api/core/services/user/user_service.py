from collections.abc import Sequence

from loguru import logger

from src.user_api.core.errors import DuplicateEmailError, ParseError, UserApiError
from src.user_api.core.models.user import (
    CreateUserRequest,
    DeleteUserRequest,
    ReadUserRequest,
    UpdateUserRequest,
)
from src.user_api.core.pagination import PaginatorResponse
from src.user_api.entities.core.user import (
    CreateUserData,
    ReadUserData,
    UpdateUserData,
    User,
    UserRepository,
)

TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Largest value a database INTEGER column or OFFSET accepts
MAX_INT = 2**63 - 1

TAG = "user_api.core.services.user.user_service.UserService."


def parse_int(field: str, value: str) -> int:
    """Convert a query string to an int; the empty string means 0."""
    if value == "":
        return 0
    try:
        number = int(value, 10)
    except ValueError as e:
        raise ParseError(field, value) from e
    if not -MAX_INT <= number <= MAX_INT:
        raise ParseError(field, value)
    return number


def parse_bool(field: str, value: str) -> bool:
    """Convert a query string to a bool; the empty string means False."""
    if value == "" or value in FALSE_WORDS:
        return False
    if value in TRUE_WORDS:
        return True
    raise ParseError(field, value)


def find_duplicate(emails: Sequence[str]) -> str | None:
    """Return the first address that appears twice (exact, case-sensitive)."""
    for i, current in enumerate(emails):
        for other in emails[i + 1 :]:
            if current == other:
                return current
    return None


class UserService:
    """Business rules in front of ``UserRepository``.

    Requests arrive in their validated wire form and are converted to the
    repository's typed inputs here. Errors from the repository are logged
    with a service tag and re-raised unchanged.
    """

    def __init__(self, repository: UserRepository):
        self._repository = repository

    def _ensure_unique(self, emails: Sequence[str], tag: str) -> None:
        duplicate = find_duplicate(emails)
        if duplicate is not None:
            logger.bind(tag=tag, error="duplicate email").error(
                "duplicate email in request"
            )
            raise DuplicateEmailError(duplicate)

    def create(self, request: CreateUserRequest) -> User:
        self._ensure_unique(request.emails, TAG + "create.01")

        try:
            return self._repository.create(
                CreateUserData(name=request.name, emails=tuple(request.emails))
            )
        except UserApiError as e:
            logger.bind(tag=TAG + "create.02", error=str(e)).error(
                "failed to create user"
            )
            raise

    def read(self, request: ReadUserRequest) -> PaginatorResponse[User]:
        data = ReadUserData(
            page=parse_int("page", request.page),
            limit=parse_int("limit", request.limit),
            order_by=request.order_by,
            sort_by=request.sort_by,
            search=request.search,
            disable_calculate_total=parse_bool(
                "disableCalculateTotal", request.disable_calculate_total
            ),
            id=request.id,
        )
        return self._repository.read(data)

    def update(self, request: UpdateUserRequest) -> User:
        if request.emails:
            self._ensure_unique(request.emails, TAG + "update.01")

        try:
            return self._repository.update(
                UpdateUserData(
                    id=request.id, name=request.name, emails=tuple(request.emails)
                )
            )
        except UserApiError as e:
            logger.bind(tag=TAG + "update.02", error=str(e)).error(
                "failed to update user"
            )
            raise

    def delete(self, request: DeleteUserRequest) -> None:
        try:
            self._repository.delete(request.id)
        except UserApiError as e:
            logger.bind(tag=TAG + "delete.01", error=str(e)).error(
                "failed to delete user"
            )
            raise
