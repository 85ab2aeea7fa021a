"""User-facing notifications raised by the sync engine."""

from abc import ABC, abstractmethod

from buildwatch.core.logging import get_logger

logger = get_logger(__name__)


class BaseNotifier(ABC):
    """Non-modal messages shown to the user by the host."""

    @abstractmethod
    def info(self, message: str) -> None:
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        pass


class LoggingNotifier(BaseNotifier):
    """Notifier for headless hosts: messages only go to the log."""

    def info(self, message: str) -> None:
        logger.bind(message=message).info("user_notification")

    def warning(self, message: str) -> None:
        logger.bind(message=message).warning("user_warning")
