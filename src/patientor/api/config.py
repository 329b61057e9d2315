"""API configuration settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class APIConfig:
    """Configuration for the reference patientor API."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False

    # CORS settings
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = field(default_factory=lambda: ["*"])
    cors_allow_headers: list[str] = field(default_factory=lambda: ["*"])

    # Patient store
    data_dir: str | None = "data/patientor"
    seed_on_startup: bool = True

    @classmethod
    def from_env(cls) -> APIConfig:
        """Load configuration from environment variables.

        ``PATIENTOR_DATA_DIR=""`` keeps the store in memory only.
        """
        data_dir = os.getenv("PATIENTOR_DATA_DIR", "data/patientor")
        return cls(
            host=os.getenv("PATIENTOR_HOST", "0.0.0.0"),
            port=int(os.getenv("PATIENTOR_PORT", "3001")),
            debug=_env_flag("PATIENTOR_DEBUG", ""),
            cors_origins=os.getenv("PATIENTOR_CORS_ORIGINS", "*").split(","),
            data_dir=data_dir or None,
            seed_on_startup=_env_flag("PATIENTOR_SEED", "true"),
        )


# Global config instance
_config: APIConfig | None = None


def get_config() -> APIConfig:
    """Get the global API configuration instance."""
    global _config
    if _config is None:
        _config = APIConfig.from_env()
    return _config
