"""Loguru setup: console sink, optional file sink, stdlib logging redirected."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.context import get_config

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Records from these loggers are already covered by the request middleware
MUTED_RECORDS = {"uvicorn.access": logging.NOTSET, "uvicorn.error": logging.ERROR}


class InterceptHandler(logging.Handler):
    """Forward stdlib ``logging`` records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        threshold = MUTED_RECORDS.get(record.name)
        if threshold is not None and record.levelno >= threshold:
            return

        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _library_levels(config: ConfigData) -> dict[str, int]:
    return {
        "sqlalchemy.engine": logging.INFO if config.database.echo else logging.WARNING,
        "sqlalchemy.pool": logging.WARNING,
        "botocore": logging.WARNING,
        "uvicorn": logging.INFO,
        "uvicorn.error": logging.INFO,
        "uvicorn.access": logging.CRITICAL,
    }


def configure_logging(config: ConfigData | None = None) -> None:
    config = config or get_config()
    log_config = config.logging
    level = "DEBUG" if config.app.debug else log_config.level
    verbose_traces = not config.app.is_production

    logger.remove()
    logger.configure(
        extra={"request_id": "-"},
        patcher=lambda record: record["extra"].setdefault("request_id", "-"),
    )

    logger.add(
        sys.stderr,
        level=level,
        format=PLAIN_FORMAT,
        colorize=True,
        backtrace=verbose_traces,
        diagnose=verbose_traces,
    )

    if log_config.file:
        log_file = Path(log_config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        as_json = log_config.format == "json"
        logger.add(
            str(log_file),
            level=level,
            format="{message}" if as_json else PLAIN_FORMAT,
            serialize=as_json,
            rotation=f"{log_config.max_size_mb} MB",
            retention=log_config.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=verbose_traces,
            diagnose=verbose_traces,
        )

    # Route every stdlib logger through loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for existing in logging.root.manager.loggerDict.values():
        if isinstance(existing, logging.Logger):
            existing.handlers = []
            existing.propagate = True
    for name, lib_level in _library_levels(config).items():
        logging.getLogger(name).setLevel(lib_level)

    logger.bind(
        app_level=level,
        app_format=log_config.format,
        app_file=log_config.file,
        environment=config.app.environment,
    ).info("Logging configured")
