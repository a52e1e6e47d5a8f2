#!/usr/bin/env python3
"""Launch the Snake Arcade server."""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables from .env
from dotenv import load_dotenv  # noqa: E402

load_dotenv(project_root / ".env")

import uvicorn  # noqa: E402

from game.config import ConfigError, load_config  # noqa: E402
from main import create_app, find_available_port  # noqa: E402

logger = logging.getLogger("snake_arcade")


def main():
    parser = argparse.ArgumentParser(description="Serve the Snake game over HTTP and WebSocket")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML config file (default: $SNAKE_CONFIG or configs/default.yaml)",
    )
    parser.add_argument("--host", type=str, default=None, help="Override bind host")
    parser.add_argument("--port", type=int, default=None, help="Override port")
    parser.add_argument("--log-level", type=str, default=None, help="Override log level")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigError as e:
        parser.error(str(e))

    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.log_level:
        config.log_level = args.log_level.upper()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    port = find_available_port(config.port)
    if port != config.port:
        logger.warning("Port %d is in use, using port %d instead", config.port, port)

    logger.info("Starting server at http://localhost:%d", port)
    uvicorn.run(create_app(config), host=config.host, port=port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
