"""
Main module for the LLM gateway HTTP server.
"""

from __future__ import annotations

import asyncio

import structlog
import uvicorn

from llm_gateway.api import create_app
from llm_gateway.config import Configuration
from llm_gateway.logging_utils import setup_logging

logger = structlog.get_logger(__name__)


async def main() -> None:
    """Main entry point - serve the provider routes until interrupted."""
    config = Configuration()
    setup_logging(config.get_logging_config())

    server_config = config.get_server_config()
    uvicorn_config = server_config.get("uvicorn", {})

    app = create_app({"timeout": config.get_http_timeout()})
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=server_config["host"],
            port=server_config["port"],
            access_log=uvicorn_config.get("access_log", True),
            log_config=None,
        )
    )

    logger.info(
        "Starting gateway",
        host=server_config["host"],
        port=server_config["port"],
    )
    try:
        await server.serve()
    finally:
        logger.info("Gateway shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
