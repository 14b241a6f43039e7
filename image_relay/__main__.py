"""Run the relay with uvicorn: ``python -m image_relay``."""

from __future__ import annotations

import logging

import uvicorn

from .app import create_app
from .config import RelayConfig


def main() -> None:
    config = RelayConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
