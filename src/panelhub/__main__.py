"""Entry point for the panelhub console and broadcast server."""

import argparse
import asyncio
import logging
import sys

from panelhub.config import Config
from panelhub.runner import serve


def main():
    """Parse arguments and run the panel console."""
    parser = argparse.ArgumentParser(
        description="Panelhub: chat panel with a live event broadcast server",
    )
    parser.add_argument("--host", help="Broadcast server bind address")
    parser.add_argument("--port", type=int, help="Broadcast server port (0 = any free port)")
    parser.add_argument("--history-size", type=int, help="Events kept for /snapshot")
    parser.add_argument("--model", help="Chat model name")
    parser.add_argument("--data-dir", help="Directory for saved settings")
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Serve broadcasts only, without the interactive prompt",
    )
    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.WARNING)
    logger = logging.getLogger(__name__)

    try:
        config = Config.from_args(
            host=args.host,
            port=args.port,
            history_size=args.history_size,
            model=args.model,
            data_dir=args.data_dir,
        )
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(1)

    errors = config.validate()
    if errors:
        for err in errors:
            logger.error(err)
        sys.exit(1)

    logger.info("Settings file: %s", config.settings_path)
    try:
        asyncio.run(serve(config, interactive=not args.no_console))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
