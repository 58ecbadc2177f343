"""Document reingestion service configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_float_env, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

REINGEST_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class ReingestConfig:
    """Holds reingestion endpoint configuration values."""

    base_url: str
    resilience: ResilienceConfig
    api_key: str | None = None


def get_reingest_config(*, resilience: ResilienceConfig | None = None) -> ReingestConfig:
    values = require_env_vars(("REINGEST_BASE_URL",))
    base_url = values["REINGEST_BASE_URL"].rstrip("/")
    api_key = os.getenv("REINGEST_API_KEY") or None
    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return ReingestConfig(
        base_url=base_url,
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="reingest",
            base_url=base_url,
            timeout_seconds=optional_float_env(
                "REINGEST_TIMEOUT_SECONDS", REINGEST_TIMEOUT_SECONDS
            ),
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            default_headers=headers,
        ),
    )
