"""Database initialization helpers used by the CLI."""

from src.user_api.core.services.database.db_manage import DbManageService
from src.user_api.core.services.database.db_session import DbSessionService
from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.context import get_config


def _manage_service(config: ConfigData) -> DbManageService:
    return DbManageService(DbSessionService(config).engine)


def init_db(fresh: bool = False, config: ConfigData | None = None) -> None:
    """Create all database tables, dropping them first when ``fresh``."""
    service = _manage_service(config or get_config())
    if fresh:
        service.drop_all()
    service.create_all()


def seed_db(config: ConfigData | None = None) -> int:
    """Insert the seed users; returns how many were added."""
    main_config = config or get_config()
    return _manage_service(main_config).seed(main_config.app.time_zone)


if __name__ == "__main__":
    init_db()
