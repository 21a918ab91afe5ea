"""
HTTP server entry point.

Usage:
    secure-envelope-server

Or run directly:
    python -m secure_envelope.server

Set MASTER_KEY (64 hex characters) in the environment or a .env file.
"""

from __future__ import annotations

import uvicorn

from .api import create_app
from .config import configure_logging, load_settings


def main() -> None:
    """CLI entry point for secure-envelope-server command."""
    settings = load_settings()
    configure_logging(settings.log_level)

    app = create_app(settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
