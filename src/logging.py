"""
Logging setup shared by the whole project.

Every module imports the configured loguru logger from here:

    from src.logging import logger
"""
import sys
from pathlib import Path

from loguru import logger

import config as cfg


def init_loguru_logger(level: str = None) -> None:
    """Replace loguru's default sink with the sinks selected in config."""
    level = (level or cfg.LOG_LEVEL).upper()
    logger.remove()

    if cfg.LOG_TO_FILE:
        log_folder = Path(cfg.LOG_FOLDER)
        log_folder.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_folder.resolve() / "app.log",
            level=level,
            rotation="1 day",
            compression="zip",
            retention="7 days",
            backtrace=True,
            diagnose=True,
        )

    if cfg.LOG_TO_CONSOLE:
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
                   "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
            backtrace=True,
            diagnose=True,
        )


init_loguru_logger()

__all__ = ["logger", "init_loguru_logger"]
