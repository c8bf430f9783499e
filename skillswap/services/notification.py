import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, recipient_email: str, subject: str, body: str) -> None: ...


class LoggingNotifier:
    """Default transport: writes the message to the log instead of delivering it."""

    async def send(self, recipient_email: str, subject: str, body: str) -> None:
        logger.info("Notification to %s: %s", recipient_email, subject)


class NotificationDispatcher:
    """
    Best-effort delivery. A failing transport is logged and counted; it never
    propagates into the operation that triggered the notification.
    """

    def __init__(self, notifier: Notifier | None = None):
        self._notifier = notifier or LoggingNotifier()
        self.failures = 0

    async def dispatch(self, recipient_email: str, subject: str, body: str) -> bool:
        try:
            await self._notifier.send(recipient_email, subject, body)
        except Exception:
            self.failures += 1
            logger.exception("Notification to %s failed: %s", recipient_email, subject)
            return False
        return True
