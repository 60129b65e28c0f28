"""
Environment configuration loader for the Fuel model publisher.

Loads the upload credential and tunables from a .env file in the working
directory or from environment variables.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from dotenv import load_dotenv

# Name of the environment variable that carries the bearer token
TOKEN_ENV_VAR = "IGN_FUEL_JWT"


@dataclass
class PublisherConfig:
    """Publisher environment configuration."""

    # Bearer token for the asset server
    token: str

    # Upload settings
    upload_delay_seconds: float = 2.0
    upload_timeout_seconds: int = 300

    # Thumbnail renderer
    renderer_executable: str = "gzserver"
    renderer_plugin: str = "libModelPropShop.so"
    render_timeout_seconds: Optional[float] = None

    @classmethod
    def from_env(cls) -> "PublisherConfig":
        """
        Load configuration from environment variables.

        Attempts to load a .env file from the working directory first, then
        reads from os.environ. Values already present in the environment win.

        Returns:
            PublisherConfig instance with loaded values

        Raises:
            ValueError: If IGN_FUEL_JWT is missing or a numeric value is invalid
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        token = os.getenv(TOKEN_ENV_VAR)
        if not token:
            raise ValueError(
                f"{TOKEN_ENV_VAR} environment variable is not set. "
                f"Set {TOKEN_ENV_VAR} to a valid JWT authentication token."
            )

        upload_delay = float(os.getenv("FUEL_UPLOAD_DELAY_SECONDS", "2.0"))
        if upload_delay < 0:
            raise ValueError(
                f"FUEL_UPLOAD_DELAY_SECONDS must not be negative (got: {upload_delay})"
            )

        render_timeout = os.getenv("FUEL_RENDER_TIMEOUT_SECONDS")

        return cls(
            token=token,
            upload_delay_seconds=upload_delay,
            upload_timeout_seconds=int(os.getenv("FUEL_UPLOAD_TIMEOUT_SECONDS", "300")),
            renderer_executable=os.getenv("FUEL_RENDERER", "gzserver"),
            renderer_plugin=os.getenv("FUEL_RENDERER_PLUGIN", "libModelPropShop.so"),
            render_timeout_seconds=float(render_timeout) if render_timeout else None,
        )


# Global config instance (lazy-loaded)
_config: Optional[PublisherConfig] = None


def get_config() -> PublisherConfig:
    """
    Get or create publisher configuration singleton.

    Returns:
        PublisherConfig instance loaded from environment
    """
    global _config
    if _config is None:
        _config = PublisherConfig.from_env()
    return _config
