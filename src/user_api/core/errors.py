"""Error taxonomy shared by the repository, service and HTTP layers.

Each error carries an upper-snake ``code`` identifying the failed step. The
HTTP layer maps all of them to 500 but logs ``kind`` so business-rule
violations can be told apart from infrastructure failures.
"""

FAILED_TO_GENERATE_ID = "FAILED_TO_GENERATE_ID"
FAILED_TO_CREATE_USER = "FAILED_TO_CREATE_USER"
FAILED_TO_CREATE_EMAIL = "FAILED_TO_CREATE_EMAIL"
FAILED_TO_READ_USER_DATA = "FAILED_TO_READ_USER_DATA"
FAILED_TO_READ_EMAIL_DATA = "FAILED_TO_READ_EMAIL_DATA"
FAILED_TO_UPDATE_USER_DATA = "FAILED_TO_UPDATE_USER_DATA"
FAILED_TO_DELETE_USER_DATA = "FAILED_TO_DELETE_USER_DATA"
FAILED_TO_DELETE_EMAIL_DATA = "FAILED_TO_DELETE_EMAIL_DATA"
DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
INVALID_PARAMETER = "INVALID_PARAMETER"


class UserApiError(Exception):
    """Base class for every error raised by the user API core."""

    kind = "internal"

    def __init__(self, code: str, message: str | None = None) -> None:
        super().__init__(message or code)
        self.code = code


class BusinessRuleError(UserApiError):
    """The request violates a business rule."""

    kind = "business_rule"


class DuplicateEmailError(BusinessRuleError):
    def __init__(self, email: str) -> None:
        super().__init__(DUPLICATE_EMAIL, f"duplicate email: {email}")
        self.email = email


class ParseError(UserApiError):
    """A string request parameter could not be converted to its typed form."""

    kind = "parse"

    def __init__(self, field: str, value: str) -> None:
        super().__init__(INVALID_PARAMETER, f"invalid value for {field}: {value!r}")
        self.field = field
        self.value = value


class RepositoryError(UserApiError):
    """A storage step failed; the surrounding transaction was rolled back."""

    kind = "storage"


class RecordNotFoundError(RepositoryError):
    kind = "not_found"


class IdGenerationError(RepositoryError):
    def __init__(self, message: str | None = None) -> None:
        super().__init__(FAILED_TO_GENERATE_ID, message)
