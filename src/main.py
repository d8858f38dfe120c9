#!/usr/bin/env python3
"""zhihu-answers - Main Entry Point.

Loads configuration from the environment, sets up logging and runs the CLI.
"""

import logging
import os
import sys
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / ".env")

# Add src directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

from utils.logger import resolve_level, setup_logger
import cli

# Read version from VERSION file
_version_file = Path(__file__).parent.parent / "VERSION"
__version__ = _version_file.read_text().strip() if _version_file.exists() else "0.0.0"


def main(argv=None) -> int:
    """Configure logging and dispatch to the CLI."""
    level_name = "DEBUG" if os.getenv("ZHIHU_DEBUG") else os.getenv("LOG_LEVEL", "INFO")
    unknown_level = False
    try:
        level = resolve_level(level_name)
    except ValueError:
        level = logging.INFO
        unknown_level = True
    logger = setup_logger(
        log_file=os.getenv("LOG_FILE", "logs/zhihu_answers.log"),
        level=level
    )
    if unknown_level:
        logger.warning(f"Unknown LOG_LEVEL {level_name!r}, using INFO")
    logger.debug(f"zhihu-answers v{__version__} started")

    args = list(sys.argv[1:] if argv is None else argv)
    workers = os.getenv("ZHIHU_MAX_WORKERS")
    if workers and '--workers' not in args:
        args = ['--workers', workers] + args

    return cli.main(args)


if __name__ == "__main__":
    sys.exit(main())
