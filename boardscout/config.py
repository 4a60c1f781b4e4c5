"""
Runtime configuration via environment variables.
"""

import json
from functools import lru_cache
from typing import Any, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


def _parse_list(v: Any) -> List[str]:
    """Parse a list from a JSON string, comma-separated string or list. Never raises."""
    if v is None:
        return []
    if isinstance(v, (list, tuple, set, frozenset)):
        return [p.strip() for p in v if isinstance(p, str) and p.strip()]
    if isinstance(v, str):
        if not v.strip():
            return []
        # Try JSON list first
        try:
            parsed = json.loads(v)
            if isinstance(parsed, list):
                return [p.strip() for p in parsed if isinstance(p, str) and p.strip()]
        except (json.JSONDecodeError, TypeError):
            pass
        # Fallback: comma-separated
        return [p.strip() for p in v.split(",") if p.strip()]
    return []


class Settings(BaseSettings):
    """BoardScout settings loaded from environment variables."""

    # HTTP
    request_timeout_s: float = 30.0
    max_retries: int = 1  # 1 = single attempt, no retry
    user_agent: str = DEFAULT_USER_AGENT

    # Engine
    concurrency: int = 16  # 0 = one in-flight request per source, unbounded
    jitter_min_ms: int = 0
    jitter_max_ms: int = 100

    # Discovery
    discovery_enabled: bool = True
    discovery_backend: str = "duckduckgo"  # duckduckgo | google
    discovery_query: str = "site:boards.greenhouse.io"
    max_search_results: int = 100
    # NOTE: Union[...] prevents pydantic-settings from crashing on non-JSON env strings.
    extra_sources: Union[str, List[str], None] = []

    # Search defaults
    default_location: str = ""

    # Logging
    log_level: str = "WARNING"

    @field_validator("extra_sources", mode="before")
    @classmethod
    def parse_extra_sources(cls, v: Any) -> List[str]:
        """Parse extra board tokens from JSON string or comma-separated list."""
        return [token.lower() for token in _parse_list(v)]

    @field_validator("discovery_backend")
    @classmethod
    def check_backend(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in ("duckduckgo", "google"):
            raise ValueError(f"Unknown discovery backend: {v!r}")
        return v

    @field_validator("jitter_max_ms")
    @classmethod
    def check_jitter(cls, v: int, info) -> int:
        low = info.data.get("jitter_min_ms", 0)
        if v < low:
            raise ValueError("jitter_max_ms must be >= jitter_min_ms")
        return v

    class Config:
        env_prefix = "BOARDSCOUT_"
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
