"""Tests for the transient notification channel."""

from __future__ import annotations

from envbuilder.models import EventKind, EventLevel, LifecycleEvent, LifecycleStatus
from envbuilder.notifications import Notifier


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _event(kind: EventKind, *, silent: bool = False) -> LifecycleEvent:
    return LifecycleEvent(
        kind=kind,
        status=LifecycleStatus.PLANNING,
        title=kind.value,
        level=EventLevel.INFO,
        silent=silent,
    )


def test_notifications_expire_after_ttl():
    """Each notification disappears once its own ttl has elapsed."""
    clock = FakeClock()
    notifier = Notifier(ttl=4.0, clock=clock)

    notifier.push(_event(EventKind.PROVISIONING_STARTED))
    clock.now += 2
    notifier.push(_event(EventKind.APPLYING_PLAN))
    assert [n.kind for n in notifier.active()] == [
        EventKind.PROVISIONING_STARTED,
        EventKind.APPLYING_PLAN,
    ]

    clock.now += 2.5
    assert [n.kind for n in notifier.active()] == [EventKind.APPLYING_PLAN]

    clock.now += 2
    assert notifier.active() == []


def test_silent_events_not_shown():
    """Silent events never become notifications."""
    notifier = Notifier(clock=FakeClock())
    notifier.push(_event(EventKind.ENVIRONMENT_RESET, silent=True))
    assert notifier.active() == []


def test_limit_keeps_newest():
    """Only the newest `limit` notifications are kept."""
    notifier = Notifier(limit=2, clock=FakeClock())
    for kind in (EventKind.DESTROYING_STARTED, EventKind.ALL_DESTROYED, EventKind.APPLYING_PLAN):
        notifier.push(_event(kind))
    assert [n.kind for n in notifier.active()] == [EventKind.ALL_DESTROYED, EventKind.APPLYING_PLAN]

    notifier.clear()
    assert notifier.active() == []


def test_push_without_reading_stays_bounded():
    """Pushing many events without calling active() holds at most `limit` entries."""
    notifier = Notifier(clock=FakeClock())
    for _ in range(1000):
        notifier.push(_event(EventKind.APPLYING_PLAN))
    assert len(notifier._items) == 3
    assert len(notifier.active()) == 3


def test_push_drops_expired_entries():
    """Expired notifications are discarded on the next push."""
    clock = FakeClock()
    notifier = Notifier(ttl=1.0, limit=10, clock=clock)
    for _ in range(5):
        notifier.push(_event(EventKind.PROVISIONING_STARTED))
    clock.now += 5
    notifier.push(_event(EventKind.ENVIRONMENT_DEPLOYED))
    assert [n.kind for n in notifier._items] == [EventKind.ENVIRONMENT_DEPLOYED]
