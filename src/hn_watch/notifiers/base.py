from __future__ import annotations

from abc import ABC, abstractmethod

from hn_watch.models import Link


class NotifyError(RuntimeError):
    """Raised when a notification cannot be rendered or sent."""


class Notifier(ABC):
    @abstractmethod
    def notify(self, link: Link) -> None:
        """Send a notification for a newly discovered link."""
