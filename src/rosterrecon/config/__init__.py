"""Application configuration helpers."""

from __future__ import annotations

from .env import (
    ConfigurationError,
    MissingConfigurationError,
    configure_logging,
    optional_float_env,
    require_env_var,
    require_env_vars,
)
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .reingest import ReingestConfig, get_reingest_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ReingestConfig",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_reingest_config",
    "get_storage_config",
    "optional_float_env",
    "require_env_var",
    "require_env_vars",
]
