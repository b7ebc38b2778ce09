"""Environment-based configuration using pydantic-settings.

Every field can be overridden with a ``STATUS_BOARD_``-prefixed environment
variable or a ``.env`` file in the working directory, e.g.
``STATUS_BOARD_SUPABASE_URL=https://xyz.supabase.co``.
"""
from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STATUS_API = "https://getgearshift.app/api/status"
DEFAULT_PLATFORM_STATS_API = "https://getgearshift.app/api/stats/platform"

# Leaving the backend at these values disables the live source.
PLACEHOLDER_SUPABASE_URL = "https://placeholder.supabase.co"
PLACEHOLDER_SUPABASE_KEY = "placeholder-key"


class Settings(BaseSettings):
    """Status board settings.

    Attributes:
        status_api: Status endpoint polled by the polling source
        platform_stats_api: Platform statistics endpoint
        supabase_url: Managed backend URL for the live source
        supabase_anon_key: Managed backend access key
        status_table: Table mirrored by the live source
        source: Which status source the dashboard is wired to
        status_interval: Seconds between status refreshes
        stats_interval: Seconds between stats refreshes
        http_timeout: Timeout for the shared HTTP client
        log_level: Root logging level
    """

    model_config = SettingsConfigDict(
        env_prefix="STATUS_BOARD_",
        env_file=".env",
        extra="ignore",
    )

    status_api: str = DEFAULT_STATUS_API
    platform_stats_api: str = DEFAULT_PLATFORM_STATS_API
    supabase_url: str = PLACEHOLDER_SUPABASE_URL
    supabase_anon_key: str = PLACEHOLDER_SUPABASE_KEY
    status_table: str = "statuses"
    source: Literal["polling", "live"] = "polling"
    status_interval: float = 60.0
    stats_interval: float = 30.0
    http_timeout: float = 30.0
    log_level: str = "INFO"

    @property
    def backend_configured(self) -> bool:
        """False while the backend URL is still the documented placeholder."""
        return bool(self.supabase_url) and self.supabase_url != PLACEHOLDER_SUPABASE_URL
