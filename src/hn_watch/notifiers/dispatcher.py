"""Background delivery of notifications.

Claimed links are handed to a thread pool so the poll that discovered them
never waits on mail delivery. Delivery is best-effort: failures are logged and
the link stays claimed, so it is not notified again.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from hn_watch.models import Link

from .base import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, notifier: Notifier, max_workers: int = 2) -> None:
        self.notifier = notifier
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="notify",
        )

    def submit(self, link: Link) -> Future[bool]:
        return self._executor.submit(self._deliver, link)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _deliver(self, link: Link) -> bool:
        try:
            self.notifier.notify(link)
        except Exception as exc:  # noqa: BLE001
            logger.exception("notification for %s failed: %s", link.item_url, exc)
            return False
        return True
