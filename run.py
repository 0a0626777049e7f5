"""Entry point for the reader service."""

import logging
from pathlib import Path

import uvicorn

from reader.api import create_app
from reader.config import load_config
from reader.container import build_services


def main() -> None:
    """Initialize storage and serve the HTTP API."""
    config = load_config()

    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Ensure required directories exist
    Path(config.storage.books_dir).mkdir(parents=True, exist_ok=True)

    # Creates the SQLite schema on first start
    services = build_services(config)

    uvicorn.run(
        create_app(services),
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    main()
