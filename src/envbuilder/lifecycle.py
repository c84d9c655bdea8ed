"""Lifecycle simulator: fakes provisioning and destruction with timed stages.

    idle -> planning -> applying -> deployed
    deployed -> destroying -> destroyed -> idle

Each action runs as a single asyncio task whose stages are sequential
awaits, so a stage only starts after the previous one finished. Every stage
transition also checks that the status still holds the expected predecessor
before moving on. At most one pipeline task is pending at a time.

No resources are created; the delays stand in for a future real
orchestration call.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING

from envbuilder.config import LifecycleTimings
from envbuilder.models import EventKind, EventLevel, LifecycleEvent, LifecycleStatus

if TYPE_CHECKING:
    from envbuilder.controller import BuilderState

logger = logging.getLogger(__name__)

Listener = Callable[[LifecycleEvent], None]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class _Stage:
    kind: EventKind
    status: LifecycleStatus
    title: str
    description: str = ""
    level: EventLevel = EventLevel.INFO
    silent: bool = False


_STAGES = {
    LifecycleStatus.PLANNING: _Stage(
        EventKind.PROVISIONING_STARTED,
        LifecycleStatus.PLANNING,
        "Provisioning started",
        "Planning your environment...",
    ),
    LifecycleStatus.APPLYING: _Stage(
        EventKind.APPLYING_PLAN,
        LifecycleStatus.APPLYING,
        "Applying plan",
        "Creating cloud resources...",
    ),
    LifecycleStatus.DEPLOYED: _Stage(
        EventKind.ENVIRONMENT_DEPLOYED,
        LifecycleStatus.DEPLOYED,
        "Environment deployed",
        "Demo app is ready to deploy.",
        EventLevel.SUCCESS,
    ),
    LifecycleStatus.DESTROYING: _Stage(
        EventKind.DESTROYING_STARTED,
        LifecycleStatus.DESTROYING,
        "Destroying environment",
        "Cleaning up resources...",
    ),
    LifecycleStatus.DESTROYED: _Stage(
        EventKind.ALL_DESTROYED,
        LifecycleStatus.DESTROYED,
        "All resources destroyed",
        level=EventLevel.SUCCESS,
    ),
    LifecycleStatus.IDLE: _Stage(
        EventKind.ENVIRONMENT_RESET,
        LifecycleStatus.IDLE,
        "Environment reset",
        "Ready to provision again.",
        silent=True,
    ),
}


class LifecycleSimulator:
    """State machine over BuilderState.status driven by provision() and destroy()."""

    def __init__(
        self,
        state: BuilderState,
        timings: LifecycleTimings | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._state = state
        self.timings = timings or LifecycleTimings()
        self._sleep = sleep
        self._listeners: list[Listener] = []
        self._task: asyncio.Task[None] | None = None

    @property
    def status(self) -> LifecycleStatus:
        return self._state.status

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every transition. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def provision(self) -> bool:
        """Start provisioning. Returns False (no-op) while another pipeline is busy."""
        if self.status.busy:
            logger.info("provision ignored: environment is %s", self.status)
            return False

        loop = asyncio.get_running_loop()
        self._enter(LifecycleStatus.PLANNING)
        self._start(loop, self._run_provision())
        return True

    def destroy(self) -> bool:
        """Start destroying. Returns False (no-op) unless the environment is deployed."""
        if self.status is not LifecycleStatus.DEPLOYED:
            logger.info("destroy ignored: environment is %s", self.status)
            return False

        loop = asyncio.get_running_loop()
        self._enter(LifecycleStatus.DESTROYING)
        self._start(loop, self._run_destroy())
        return True

    async def wait(self) -> None:
        """Block until no pipeline is pending."""
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    async def _run_provision(self) -> None:
        await self._sleep(self.timings.plan_delay)
        if not self._advance(LifecycleStatus.PLANNING, LifecycleStatus.APPLYING):
            return
        await self._sleep(self.timings.apply_delay)
        self._advance(LifecycleStatus.APPLYING, LifecycleStatus.DEPLOYED)

    async def _run_destroy(self) -> None:
        await self._sleep(self.timings.destroy_delay)
        if not self._advance(LifecycleStatus.DESTROYING, LifecycleStatus.DESTROYED):
            return
        await self._sleep(self.timings.reset_delay)
        self._advance(LifecycleStatus.DESTROYED, LifecycleStatus.IDLE)

    def _start(
        self, loop: asyncio.AbstractEventLoop, pipeline: Coroutine[None, None, None]
    ) -> None:
        previous = self._task
        if previous is not None and not previous.done():
            # Only the destroyed -> idle reset can still be pending here.
            logger.debug("superseding pending pipeline")
            previous.cancel()
        self._task = loop.create_task(pipeline)
        self._task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("lifecycle pipeline failed: %s", exc, exc_info=exc)

    def _advance(self, expected: LifecycleStatus, new: LifecycleStatus) -> bool:
        if self.status is not expected:
            logger.debug(
                "skipping %s -> %s: status is already %s", expected, new, self.status
            )
            return False
        self._enter(new)
        return True

    def _enter(self, status: LifecycleStatus) -> None:
        previous = self._state.status
        self._state.status = status
        logger.info("environment %s -> %s", previous, status)

        stage = _STAGES[status]
        self._emit(
            LifecycleEvent(
                kind=stage.kind,
                status=status,
                title=stage.title,
                description=stage.description,
                level=stage.level,
                silent=stage.silent,
            )
        )

    def _emit(self, event: LifecycleEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("lifecycle listener failed on %s", event.kind)
