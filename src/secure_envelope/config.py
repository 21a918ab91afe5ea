"""
Environment configuration.

Values are read from the process environment, optionally seeded from a
``.env`` file:

    MASTER_KEY     64 hex characters (32 bytes), required for crypto routes
    HOST           bind address (default 0.0.0.0)
    PORT           listen port (default 3001)
    CORS_ORIGINS   comma separated origins (default *)
    LOG_LEVEL      logging level name (default INFO)
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from dotenv import load_dotenv

from .crypto import AES_256_KEY_SIZE
from .errors import ConfigError

_MASTER_KEY_RE = re.compile(r"[0-9a-fA-F]{64}")

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001


@dataclass
class Settings:
    """Runtime settings for the HTTP service."""

    master_key_hex: Optional[str] = field(default=None, repr=False)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def master_key(self) -> bytes:
        """
        Return the validated master key.

        Raises:
            ConfigError: If MASTER_KEY is unset or malformed
        """
        return parse_master_key(self.master_key_hex)


def parse_master_key(value: Optional[str]) -> bytes:
    """
    Validate a hex master key and decode it to 32 bytes.

    The key value itself is never included in error messages.

    Raises:
        ConfigError: If the value is missing, has the wrong length or is not hex
    """
    if not value:
        raise ConfigError("MASTER_KEY environment variable is not set")
    if len(value) != AES_256_KEY_SIZE * 2:
        raise ConfigError("MASTER_KEY must be a 64-character hex string (32 bytes)")
    if not _MASTER_KEY_RE.fullmatch(value):
        raise ConfigError("MASTER_KEY must contain only hexadecimal characters")
    return bytes.fromhex(value)


def load_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env_file: Optional path to a .env file; defaults to dotenv's lookup

    Raises:
        ConfigError: If PORT is not an integer
    """
    load_dotenv(env_file)

    port_value = os.environ.get("PORT")
    try:
        port = int(port_value) if port_value else DEFAULT_PORT
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {port_value!r}") from None

    origins = os.environ.get("CORS_ORIGINS", "*")

    return Settings(
        master_key_hex=os.environ.get("MASTER_KEY") or None,
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=port,
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
