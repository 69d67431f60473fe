"""
Command line entrypoint: serve the API with uvicorn.

Usage:
    python -m tms_api --port 4000 --env development --db-path ./data/tms.db

Flags override the matching environment variables (TMS_PORT, TMS_ENV,
TMS_DB_PATH).
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import List, Optional

import uvicorn

from .logging_setup import setup_logging
from .main import create_app
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None, defaults: Optional[Settings] = None) -> Settings:
    """Merge command line flags into settings loaded from the environment."""
    base = defaults or get_settings()
    parser = argparse.ArgumentParser(prog="tms-api", description="Task Management System API server")
    parser.add_argument("--port", type=int, default=base.port, help="API server port")
    parser.add_argument(
        "--env",
        choices=["development", "staging", "production"],
        default=base.env,
        help="Environment (development|staging|production)",
    )
    parser.add_argument("--db-path", default=base.db_path, help="Path to the SQLite database file")
    args = parser.parse_args(argv)
    return replace(base, port=args.port, env=args.env, db_path=args.db_path)


def main(argv: Optional[List[str]] = None) -> None:
    settings = parse_args(argv)
    setup_logging(settings.log_level)
    logger.info("Listening on :%d db=%s", settings.port, settings.db_path)
    # log_config=None keeps uvicorn on the handlers installed above.
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
