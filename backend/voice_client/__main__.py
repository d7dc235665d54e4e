"""Command-line entry point: ``python -m voice_client``.

Configuration comes from the environment; the room URL may be supplied on the
command line in place of a ``room_url`` query string.
"""

import argparse
import os

import uvicorn

from .config import ClientConfig
from .main import create_app
from .observability import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Voice agent session client")
    parser.add_argument(
        "--room-url",
        type=str,
        default=os.getenv("ROOM_URL"),
        help="Room to join when rooms are entered manually",
    )
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = ClientConfig.from_env()
    level = args.log_level or config.log_level
    setup_logging(level)

    app = create_app(config=config, room_url=args.room_url)
    uvicorn.run(app, host=args.host, port=args.port, log_level=level.lower())


if __name__ == "__main__":
    main()
