"""
src/utils/logger.py
Package logger: every module logs under the "vietlott" namespace, which owns
one Rich console handler and (unless LOG_TO_FILE=0) one rotating log file.
"""
import logging
import os
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

ROOT_LOGGER = "vietlott"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.propagate = False

    console = RichHandler(rich_tracebacks=True, show_path=False)
    console.setLevel(logging.DEBUG)
    root.addHandler(console)

    if os.getenv("LOG_TO_FILE", "1") != "0":
        log_dir = os.getenv("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, f"{ROOT_LOGGER}.log"),
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
    return root


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Child logger of the package namespace, e.g. get_logger("ensemble") → vietlott.ensemble."""
    root = _configure_root()
    if name == ROOT_LOGGER:
        return root
    return root.getChild(name)
