"""Response envelope shared by every endpoint.

Bodies have the shape ``{code, description, data}`` where ``code`` is the
HTTP status zero-padded to four digits and ``description`` the upper-snake
reason phrase. ``data`` is left out when there is nothing to return.
"""

from http import HTTPStatus
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from starlette.responses import JSONResponse

T = TypeVar("T")

# 200 is reported as SUCCESS rather than OK
DESCRIPTION_OVERRIDES = {HTTPStatus.OK: "SUCCESS"}


class MainResponse(BaseModel, Generic[T]):
    code: str
    description: str
    data: T | None = None


def status_code_text(status_code: int) -> str:
    return f"{status_code:04d}"


def status_description(status_code: int) -> str:
    status = HTTPStatus(status_code)
    if status in DESCRIPTION_OVERRIDES:
        return DESCRIPTION_OVERRIDES[status]
    return status.phrase.upper().replace(" ", "_").replace("-", "_")


def envelope(status_code: int, data: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "code": status_code_text(status_code),
        "description": status_description(status_code),
    }
    if data is not None:
        body["data"] = data
    return body


def main_response(
    status_code: int, data: Any = None, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Build the JSON response; pydantic models in ``data`` are dumped by alias."""
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    return JSONResponse(
        status_code=status_code, content=envelope(status_code, data), headers=headers
    )
