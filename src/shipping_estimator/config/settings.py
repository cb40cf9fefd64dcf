"""
Centralized settings for the shipping estimator.

Values are read from environment variables prefixed SHIPPING_ESTIMATOR_.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "SHIPPING_ESTIMATOR_"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    project_root: Path

    # Remote pricing service; empty URL disables it
    pricing_service_url: str = "http://localhost:8000"
    pricing_service_timeout: float = 5.0

    log_level: str = "INFO"

    # API server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def remote_pricing_enabled(self) -> bool:
        return bool(self.pricing_service_url.strip())

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the environment."""
        root = project_root or get_project_root()

        return cls(
            project_root=root,
            pricing_service_url=_env("PRICING_SERVICE_URL", "http://localhost:8000"),
            pricing_service_timeout=float(_env("PRICING_SERVICE_TIMEOUT", "5.0")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            api_host=_env("API_HOST", "0.0.0.0"),
            api_port=int(_env("API_PORT", "8000")),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
