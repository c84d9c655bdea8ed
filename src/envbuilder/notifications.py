"""Transient notifications for lifecycle events.

Notifications are fire-and-forget: push() never blocks, and each entry
dismisses itself once its ttl has elapsed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from envbuilder.models import EventKind, EventLevel, LifecycleEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    kind: EventKind
    title: str
    description: str
    level: EventLevel
    expires_at: float


class Notifier:
    """Auto-dismissing notification channel. push() doubles as a lifecycle listener."""

    def __init__(
        self,
        ttl: float = 4.0,
        *,
        limit: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self.limit = limit
        self._clock = clock
        self._items: list[Notification] = []

    def push(self, event: LifecycleEvent) -> None:
        if event.silent:
            return
        self._prune()
        self._items.append(
            Notification(
                kind=event.kind,
                title=event.title,
                description=event.description,
                level=event.level,
                expires_at=self._clock() + self.ttl,
            )
        )
        del self._items[: -self.limit]
        logger.debug("notify: %s", event.title)

    def active(self) -> list[Notification]:
        """Unexpired notifications, newest last, at most `limit` of them."""
        self._prune()
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()

    def _prune(self) -> None:
        now = self._clock()
        self._items = [n for n in self._items if n.expires_at > now]
