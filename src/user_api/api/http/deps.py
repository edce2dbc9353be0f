"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.user_api.api.http.app_data import ApplicationDependencies
from src.user_api.core.services import (
    ObjectStorageService,
    RedisService,
    TemporalClientService,
    UserService,
)
from src.user_api.entities.core.user import UserRepository
from src.user_api.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a session for the duration of one request."""
    app_deps = get_app_dependencies(request)
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_redis_service(request: Request) -> RedisService:
    return get_app_dependencies(request).redis_service


def get_temporal_service(request: Request) -> TemporalClientService:
    return get_app_dependencies(request).temporal_service


def get_object_storage_service(request: Request) -> ObjectStorageService:
    return get_app_dependencies(request).object_storage_service


def get_user_repository(
    request: Request, db: Session = Depends(get_db_session)
) -> UserRepository:
    config: ConfigData = request.app.state.config
    return UserRepository(
        db,
        config.app.time_zone,
        default_limit=config.pagination.default_limit,
        max_limit=config.pagination.max_limit,
    )


def get_user_service(
    repository: UserRepository = Depends(get_user_repository),
) -> UserService:
    return UserService(repository)
