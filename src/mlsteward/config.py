"""Configuration and environment handling for mlsteward."""

import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

__all__ = [
    "ClientSettings",
    "get_settings",
    "reset_settings",
]

_ALLOWED_SCHEMES = frozenset(["http", "https"])


class ClientSettings(BaseModel):
    """Connection settings for the tracking server.

    All settings can be customized via environment variables.
    """

    tracking_uri: str = Field(
        default="http://127.0.0.1:5000",
        description="Base URL of the MLflow tracking server",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single HTTP request in seconds",
    )

    search_page_size: int = Field(
        default=1000,
        gt=0,
        description="max_results sent with each paginated run search",
    )

    @field_validator("tracking_uri")
    @classmethod
    def _validate_tracking_uri(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.netloc:
            raise ValueError(f"tracking_uri must be an http(s) URL, got: {value!r}")
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "ClientSettings":
        """Create ClientSettings from environment variables.

        Environment variables:
        - MLFLOW_TRACKING_URI: Tracking server URL (default: http://127.0.0.1:5000)
        - MLSTEWARD_REQUEST_TIMEOUT: Request timeout in seconds (default: 30)
        - MLSTEWARD_SEARCH_PAGE_SIZE: Page size for run searches (default: 1000)
        """
        return cls(
            tracking_uri=os.environ.get("MLFLOW_TRACKING_URI") or cls.model_fields["tracking_uri"].default,
            request_timeout=float(os.environ.get("MLSTEWARD_REQUEST_TIMEOUT", cls.model_fields["request_timeout"].default)),
            search_page_size=int(os.environ.get("MLSTEWARD_SEARCH_PAGE_SIZE", cls.model_fields["search_page_size"].default)),
        )


# Global settings instance
_settings: ClientSettings | None = None


def get_settings() -> ClientSettings:
    """Get client settings.

    Returns cached instance if already initialized.
    """
    global _settings
    if _settings is None:
        _settings = ClientSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None
