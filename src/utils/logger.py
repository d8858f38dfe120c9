"""Logging setup for zhihu-answers: console output plus an optional rotating file."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at DEBUG on every request made through requests
HTTP_LOGGERS = ("urllib3", "charset_normalizer")


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level number or name ("debug", "WARNING") into a level number.

    Raises:
        ValueError: If the name is not a logging level.
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logger(
    name: str = "zhihu_answers",
    log_file: str = None,
    level: Union[int, str] = logging.INFO,
    max_bytes: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 5,
    quiet: Iterable[str] = HTTP_LOGGERS
) -> logging.Logger:
    """Set up and return the application logger.

    Calling it again for the same logger replaces the existing handlers.
    Loggers named in ``quiet`` are held at WARNING or above so request
    chatter does not drown the scraper's own records.
    """
    level = resolve_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler()]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        ))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for noisy in quiet:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))

    return logger
