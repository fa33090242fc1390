"""Loguru handler configuration for applications embedding the wallet."""

import sys
from pathlib import Path

from loguru import logger

from eth_usdt_wallet.config import get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str | None = None, log_file: Path | str | None = None) -> list[int]:
    """Configure loguru logging.

    The library never installs handlers on import; call this from the
    application entry point.

    Args:
        level: Console log level. Defaults to the configured log_level.
        log_file: Optional path for a rotating DEBUG-level file log.

    Returns:
        Handler ids, so callers can remove them again.
    """
    level = level or get_settings().log_level

    logger.remove()  # Remove default handler
    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)]

    if log_file is not None:
        handler_ids.append(
            logger.add(
                str(log_file),
                rotation="100 MB",
                retention="7 days",
                level="DEBUG",
            )
        )

    return handler_ids
