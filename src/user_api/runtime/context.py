"""Process-wide configuration held in a context variable.

The configuration is loaded once at import time. ``with_context`` overlays
a partial configuration for the duration of a block, which is how the CLI
and the tests point the application at another database.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel

from src.user_api.runtime.config.config_data import ConfigData
from src.user_api.runtime.config.config_template import load_templated_yaml
from src.user_api.runtime.config.settings import EnvironmentVariables


@dataclass(frozen=True)
class AppContext:
    config: ConfigData


def load_default_config() -> ConfigData:
    """Load ``CONFIG_FILE`` after the .env file, or fall back to model defaults."""
    load_dotenv()
    env = EnvironmentVariables()
    config_file = Path(env.config_file)
    if config_file.exists():
        return load_templated_yaml(config_file)
    logger.warning(f"{config_file} not found; using built-in defaults")
    return ConfigData(app={"environment": env.app_environment})


_current: ContextVar[AppContext] = ContextVar(
    "user_api_context", default=AppContext(config=load_default_config())
)


def get_context() -> AppContext:
    return _current.get()


def get_config() -> ConfigData:
    return _current.get().config


def explicit_values(model: BaseModel) -> dict[str, Any]:
    """Fields set on ``model`` by the caller, recursing into nested models."""
    values: dict[str, Any] = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = explicit_values(value)
            if nested:
                values[name] = nested
            elif name in model.model_fields_set:
                values[name] = value.model_dump()
        elif name in model.model_fields_set:
            values[name] = value
    return values


def merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        merged[key] = (
            merge_dicts(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return merged


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[None]:
    """Overlay the explicitly-set parts of ``config_override`` within the block.

    Example:
        with with_context(ConfigData(pagination={"default_limit": 5})):
            assert get_config().pagination.default_limit == 5
    """
    if config_override is None:
        yield
        return
    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData or None, not {type(config_override).__name__}"
        )

    base = get_context()
    merged = ConfigData.model_validate(
        merge_dicts(base.config.model_dump(), explicit_values(config_override))
    )
    token = _current.set(replace(base, config=merged))
    try:
        yield
    finally:
        _current.reset(token)
