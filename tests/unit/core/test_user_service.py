"""Tests for the user service business rules and parameter coercion."""

from unittest.mock import Mock

import pytest

from src.user_api.core.errors import (
    DUPLICATE_EMAIL,
    FAILED_TO_CREATE_USER,
    BusinessRuleError,
    DuplicateEmailError,
    ParseError,
    RecordNotFoundError,
    RepositoryError,
)
from src.user_api.core.models.user import (
    CreateUserRequest,
    DeleteUserRequest,
    ReadUserRequest,
    UpdateUserRequest,
)
from src.user_api.core.services import UserService
from src.user_api.core.services.user.user_service import (
    find_duplicate,
    parse_bool,
    parse_int,
)
from src.user_api.entities.core.user import (
    CreateUserData,
    ReadUserData,
    UpdateUserData,
    UserRepository,
)

USER_ID = "09123ae8-cce2-4d40-aac1-ae1b3c51cc77"


@pytest.fixture
def repository() -> Mock:
    return Mock(spec=UserRepository)


@pytest.fixture
def service(repository: Mock) -> UserService:
    return UserService(repository)


class TestHelpers:
    @pytest.mark.parametrize(
        ("emails", "expected"),
        [
            ([], None),
            (["a@x.io"], None),
            (["a@x.io", "b@x.io"], None),
            (["a@x.io", "b@x.io", "a@x.io"], "a@x.io"),
            (["A@x.io", "a@x.io"], None),
        ],
    )
    def test_find_duplicate(self, emails, expected):
        assert find_duplicate(emails) == expected

    @pytest.mark.parametrize("value", ["1", "t", "T", "TRUE", "true", "True"])
    def test_parse_bool_true_words(self, value):
        assert parse_bool("flag", value) is True

    @pytest.mark.parametrize("value", ["", "0", "f", "F", "FALSE", "false", "False"])
    def test_parse_bool_false_words(self, value):
        assert parse_bool("flag", value) is False

    @pytest.mark.parametrize("value", ["yes", "tRuE", "2", " true"])
    def test_parse_bool_rejects_other_words(self, value):
        with pytest.raises(ParseError) as exc_info:
            parse_bool("flag", value)
        assert exc_info.value.field == "flag"

    def test_parse_int(self):
        assert parse_int("page", "") == 0
        assert parse_int("page", "42") == 42
        with pytest.raises(ParseError):
            parse_int("page", "4x")

    @pytest.mark.parametrize("value", ["9223372036854775808", "9" * 30])
    def test_parse_int_rejects_values_beyond_64_bits(self, value):
        with pytest.raises(ParseError) as exc_info:
            parse_int("page", value)
        assert exc_info.value.value == value

    def test_parse_int_accepts_largest_64_bit_value(self):
        assert parse_int("page", "9223372036854775807") == 2**63 - 1


class TestUserServiceCreate:
    def test_create_delegates_to_repository(self, service, repository):
        request = CreateUserRequest(name="Andrea", emails=["a@x.io", "b@x.io"])

        result = service.create(request)

        repository.create.assert_called_once_with(
            CreateUserData(name="Andrea", emails=("a@x.io", "b@x.io"))
        )
        assert result is repository.create.return_value

    def test_duplicate_email_never_reaches_repository(self, service, repository):
        request = CreateUserRequest(name="Andrea", emails=["a@x.io", "a@x.io"])

        with pytest.raises(DuplicateEmailError) as exc_info:
            service.create(request)

        assert exc_info.value.code == DUPLICATE_EMAIL
        assert exc_info.value.kind == "business_rule"
        assert isinstance(exc_info.value, BusinessRuleError)
        repository.create.assert_not_called()

    def test_repository_error_is_reraised_unchanged(self, service, repository):
        error = RepositoryError(FAILED_TO_CREATE_USER, "boom")
        repository.create.side_effect = error

        with pytest.raises(RepositoryError) as exc_info:
            service.create(CreateUserRequest(name="Andrea", emails=["a@x.io"]))

        assert exc_info.value is error


class TestUserServiceRead:
    def test_read_coerces_parameters(self, service, repository):
        request = ReadUserRequest(
            page="2",
            limit="25",
            order_by="createdAt",
            sort_by="desc",
            search="and",
            disable_calculate_total="true",
            id=USER_ID,
        )

        service.read(request)

        repository.read.assert_called_once_with(
            ReadUserData(
                page=2,
                limit=25,
                order_by="createdAt",
                sort_by="desc",
                search="and",
                disable_calculate_total=True,
                id=USER_ID,
            )
        )

    def test_read_empty_parameters_use_zero_values(self, service, repository):
        service.read(ReadUserRequest())

        repository.read.assert_called_once_with(ReadUserData())

    def test_read_rejects_malformed_flag(self, service, repository):
        request = ReadUserRequest.model_construct(
            page="", limit="", order_by="", sort_by="", search="",
            disable_calculate_total="maybe", id="",
        )

        with pytest.raises(ParseError):
            service.read(request)
        repository.read.assert_not_called()


class TestUserServiceUpdate:
    def test_update_checks_duplicates(self, service, repository):
        request = UpdateUserRequest(id=USER_ID, emails=["a@x.io", "a@x.io"])

        with pytest.raises(DuplicateEmailError):
            service.update(request)
        repository.update.assert_not_called()

    def test_update_without_emails_skips_duplicate_check(self, service, repository):
        service.update(UpdateUserRequest(id=USER_ID, name="Andrea"))

        repository.update.assert_called_once_with(
            UpdateUserData(id=USER_ID, name="Andrea", emails=())
        )

    def test_update_not_found_is_reraised(self, service, repository):
        repository.update.side_effect = RecordNotFoundError("FAILED_TO_READ_USER_DATA")

        with pytest.raises(RecordNotFoundError):
            service.update(UpdateUserRequest(id=USER_ID, name="Andrea"))


class TestUserServiceDelete:
    def test_delete_passes_id_through(self, service, repository):
        service.delete(DeleteUserRequest(id=USER_ID))

        repository.delete.assert_called_once_with(USER_ID)


class TestUserServiceWithDatabase:
    def test_duplicate_create_persists_nothing(self, user_service, user_repository):
        with pytest.raises(DuplicateEmailError):
            user_service.create(CreateUserRequest(name="Dup", emails=["a@x.io", "a@x.io"]))

        assert user_repository.read(ReadUserData()).total == 0
