"""Client configuration settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "http://localhost:3001/api"


@dataclass
class ClientConfig:
    """Configuration for talking to the patientor backend."""

    api_url: str = DEFAULT_API_URL
    timeout: float = 10.0

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Load configuration from environment variables."""
        return cls(
            api_url=os.getenv("PATIENTOR_API_URL", DEFAULT_API_URL),
            timeout=float(os.getenv("PATIENTOR_TIMEOUT", "10.0")),
        )


# Global config instance
_config: ClientConfig | None = None


def get_config() -> ClientConfig:
    """Get the global client configuration instance."""
    global _config
    if _config is None:
        _config = ClientConfig.from_env()
    return _config
