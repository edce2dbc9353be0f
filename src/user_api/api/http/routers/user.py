"""User API router with CRUD operations."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from starlette.responses import JSONResponse

from src.user_api.api.http.deps import get_user_service
from src.user_api.api.http.responses import main_response
from src.user_api.core.models.user import (
    CreateUserRequest,
    DeleteUserRequest,
    ReadUserRequest,
    UpdateUserBody,
    UpdateUserRequest,
)
from src.user_api.core.services import UserService

router = APIRouter(prefix="/user", tags=["user"])


@router.post("", status_code=201)
def create_user(
    request: Annotated[CreateUserRequest, Body()],
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Create a user together with its emails."""
    user = service.create(request)
    return main_response(201, user)


@router.get("")
def read_users(
    page: str = "",
    limit: str = "",
    order_by: Annotated[str, Query(alias="orderBy")] = "",
    sort_by: Annotated[str, Query(alias="sortBy")] = "",
    search: str = "",
    disable_calculate_total: Annotated[str, Query(alias="disableCalculateTotal")] = "",
    id: str = "",
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """List users one page at a time."""
    request = ReadUserRequest.model_validate(
        {
            "page": page,
            "limit": limit,
            "orderBy": order_by,
            "sortBy": sort_by,
            "search": search,
            "disableCalculateTotal": disable_calculate_total,
            "id": id,
        }
    )
    page_data = service.read(request)
    return main_response(200, page_data)


@router.patch("/{id}")
def update_user(
    id: str,
    body: Annotated[UpdateUserBody | None, Body()] = None,
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    """Rename a user and/or replace all of its emails.

    Without a body only ``updatedAt`` is refreshed.
    """
    body = body or UpdateUserBody()
    service.update(UpdateUserRequest(id=id, name=body.name, emails=body.emails))
    return main_response(200)


@router.delete("/{id}")
def delete_user(
    id: str,
    service: UserService = Depends(get_user_service),
) -> JSONResponse:
    service.delete(DeleteUserRequest(id=id))
    return main_response(200)
