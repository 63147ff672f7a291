import logging
from typing import Protocol

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
DELETED = "deleted"
FAILED = "failed"


class Notifier(Protocol):
    def notify(self, outcome: str, entity: str, detail: str) -> None:
        ...


class LoggingNotifier:
    """
    Default notifier: writes every outcome to the application log.
    A UI layer can swap in its own implementation (toasts, websockets...).
    """

    def notify(self, outcome: str, entity: str, detail: str) -> None:
        if outcome == FAILED:
            logger.warning(f"[{entity}] {outcome}: {detail}")
        else:
            logger.info(f"[{entity}] {outcome}: {detail}")


class RecordingNotifier:
    """Keeps outcomes in memory, handy for tests and batch jobs."""

    def __init__(self):
        self.events = []

    def notify(self, outcome: str, entity: str, detail: str) -> None:
        self.events.append((outcome, entity, detail))


default_notifier = LoggingNotifier()
