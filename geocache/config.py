from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables and .env file.

    Eviction policy values (``cache_max_entries``, ``cache_ttl_seconds``) and
    the bypass token are read once when the server starts and stay fixed for
    the lifetime of the process.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Geocoding provider (positionstack-compatible)
    geocoding_api_key: str = ""
    geocoding_url: str = "http://api.positionstack.com/v1/forward"
    reverse_geocoding_url: str = "http://api.positionstack.com/v1/reverse"
    geocoding_timeout_seconds: float = 10.0

    # Eviction policy, applied to each logical cache independently
    cache_max_entries: int = 10
    cache_ttl_seconds: float = 300.0

    # Addresses matching this token (case-insensitive) are never cached
    cache_bypass_token: str = "goa"

    # Remote hosting: transport and bind address
    mcp_transport: str = "stdio"
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8000

    # Paths & logging. Default is <project_root>/data so it works
    # regardless of the process working directory.
    data_dir: Path = Path(__file__).resolve().parent.parent / "data"
    log_level: str = "INFO"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached Settings singleton. Created on first call."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached settings. Used in tests."""
    global _settings  # noqa: PLW0603
    _settings = None
