"""
SSDB Client Configuration Settings

Connection defaults for the client, read from the environment.
Explicit arguments to SSDBClient / AsyncSSDBClient always win.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional


def _env_timeout() -> Optional[float]:
    raw = os.environ.get("SSDB_TIMEOUT", "")
    return float(raw) if raw else None


@dataclass
class Settings:
    """Client configuration settings."""

    # Network settings
    HOST: str = os.environ.get("SSDB_HOST", "127.0.0.1")
    PORT: int = int(os.environ.get("SSDB_PORT", "8888"))

    # Connection settings
    TIMEOUT: Optional[float] = _env_timeout()  # None blocks indefinitely
    READ_BUFFER_SIZE: int = 8192
    WRITE_BUFFER_SIZE: int = 8192

    # Logging settings
    DEBUG: bool = os.environ.get("SSDB_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("SSDB_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()


def setup_logging(debug: bool = None) -> None:
    """Configure root logging for scripts and applications using the client."""
    if debug is None:
        debug = settings.DEBUG
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )
