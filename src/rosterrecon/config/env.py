"""Environment variable loaders and the logging setup they drive."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

LOG_LEVEL_ENV = "ROSTERRECON_LOG_LEVEL"

# Loggers that report every request or migration step at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


class ConfigurationError(RuntimeError):
    """An environment value is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def optional_float_env(name: str, default: float) -> float:
    """Return a float environment variable, falling back to ``default`` when unset."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger for CLI output.

    ``level`` defaults to ``ROSTERRECON_LOG_LEVEL`` (a level name such as ``DEBUG``)
    and then to INFO. Per-request HTTP logs and migration chatter are held at WARNING
    or at ``level``, whichever is higher.
    """

    if level is None:
        level = _log_level_from_env()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _log_level_from_env() -> int:
    raw = os.getenv(LOG_LEVEL_ENV)
    if raw is None or not raw.strip():
        return logging.INFO
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ConfigurationError(f"{LOG_LEVEL_ENV} must be a logging level name, got {raw!r}")
    return level
