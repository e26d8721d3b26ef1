"""Application entry point for the explorer API server."""

from __future__ import annotations

import os

import uvicorn

from insight_api.config.settings import AppConfig


def main() -> None:
    """Start the explorer API server."""
    config = AppConfig()
    reload = os.getenv("INSIGHT_RELOAD", "false").lower() in ("1", "true", "yes")
    uvicorn.run(
        "insight_api.api.app:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        log_level="debug" if config.debug else "info",
    )


if __name__ == "__main__":
    main()
