"""Loading of ``config.yaml`` with ``${...}`` environment placeholders."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.user_api.runtime.config.config_data import ConfigData

# ${NAME}, ${NAME:-fallback} or ${NAME:?reason}
PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}")

ENVIRONMENT_VAR = "APP_ENVIRONMENT"
REQUIRED_IN_PRODUCTION = {
    "DATABASE_URL": "Database connection URL",
}


def _resolve_placeholder(match: re.Match[str]) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.environ.get(name)
    if value is not None:
        return value
    if op == ":-":
        return arg
    if op == ":?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Expand shell-style placeholders in ``text``.

    ``${NAME}`` must be set, ``${NAME:-fallback}`` falls back when unset and
    ``${NAME:?reason}`` fails with ``reason`` when unset.
    """
    return PLACEHOLDER.sub(_resolve_placeholder, text)


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Copy ``<ENV>_NAME`` variables onto ``NAME`` for the active environment.

    Returns the names of the variables that were set.
    """
    prefix = env_mode.upper() + "_"
    promoted = {
        key[len(prefix):]: value
        for key, value in os.environ.items()
        if key.startswith(prefix) and key != ENVIRONMENT_VAR and len(key) > len(prefix)
    }
    for key, value in promoted.items():
        os.environ[key] = value
        logger.bind(source=prefix + key).debug(f"Environment override for {key}")
    return list(promoted)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read ``file_path``, expand placeholders and validate the ``config`` section.

    Raises:
        FileNotFoundError: The file does not exist.
        ValueError: A required variable is missing, the YAML is malformed or
            the values fail validation.
    """
    raw = Path(file_path).read_text()

    env_mode = os.getenv(ENVIRONMENT_VAR, "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    overrides = apply_environment_overrides(env_mode)
    if overrides:
        logger.info(f"Applied {env_mode} overrides: {overrides}")

    for name, purpose in validate_config_env_vars(env_mode).items():
        logger.warning(f"{name} is not set ({purpose}); using the file default")

    try:
        document = yaml.safe_load(substitute_env_vars(raw))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not isinstance(document, dict):
        raise ValueError(f"{file_path} does not contain a mapping")

    try:
        config = ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.is_production and config.app.debug:
        logger.warning("Debug mode is enabled in production")

    return config


def validate_config_env_vars(environment: str) -> dict[str, str]:
    """Return the variables ``environment`` needs but the process lacks."""
    if environment != "production":
        return {}
    return {
        name: purpose
        for name, purpose in REQUIRED_IN_PRODUCTION.items()
        if not os.getenv(name)
    }
