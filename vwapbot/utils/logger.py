"""Structured logging setup using loguru for VWAPBot."""

from __future__ import annotations

import sys

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
    "{level: <8} | "
    "{module}:{function}:{line} | "
    "{message}"
)


def setup_logger(log_level: str = "INFO", log_file: str | None = "logs/vwapbot.log") -> None:
    """Configure loguru for console and (optionally) file logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to the main log file, or None for console only.
    """
    logger.remove()

    logger.add(sys.stderr, level=log_level, format=_CONSOLE_FORMAT, colorize=True)

    if log_file:
        logger.add(
            log_file,
            level=log_level,
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            compression="zip",
        )
        # Separate error log file
        logger.add(
            log_file.replace(".log", "_error.log"),
            level="ERROR",
            format=_FILE_FORMAT,
            rotation="10 MB",
            retention=5,
            compression="zip",
        )

    logger.info("Logger initialised | level={}, file={}", log_level, log_file)
