import logging
import sys
from typing import Any

from loguru import logger

from buildwatch.config import get_settings


class InterceptHandler(logging.Handler):
    """Intercept stdlib logging and redirect to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _scheduler_log_filter(record: dict[str, Any]) -> bool:
    """Only show APScheduler's per-job chatter at DEBUG level."""
    if record["name"].startswith("apscheduler"):
        return bool(record["level"].no >= 30)  # WARNING and above
    return True


def setup_logging(debug: bool | None = None) -> None:
    """Configure loguru for the application."""
    if debug is None:
        debug = get_settings().debug

    # Remove default handler
    logger.remove()

    if debug:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level> | {extra}"
            ),
            backtrace=True,
            diagnose=True,
        )
    else:
        logger.add(
            sys.stderr,
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}",
            filter=_scheduler_log_filter,
            backtrace=True,
            diagnose=False,
        )

    # Intercept stdlib logging (aiohttp, apscheduler)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ["aiohttp", "apscheduler"]:
        logging.getLogger(name).handlers = [InterceptHandler()]


def get_logger(name: str) -> Any:
    """Get a logger bound to a name."""
    return logger.bind(name=name)
