"""Shared fixtures: a manually advanced clock for lifecycle pipelines."""

from __future__ import annotations

import asyncio

import pytest

from envbuilder.config import LifecycleTimings
from envbuilder.controller import BuilderState
from envbuilder.lifecycle import LifecycleSimulator
from envbuilder.models import LifecycleEvent


class ManualClock:
    """Stand-in for asyncio.sleep whose sleeps only finish when advance() is called."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._waiting: list[asyncio.Future[None]] = []

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        fut = asyncio.get_running_loop().create_future()
        self._waiting.append(fut)
        await fut

    @property
    def sleeping(self) -> int:
        return sum(1 for f in self._waiting if not f.done())

    async def settle(self) -> None:
        """Let every runnable task reach its next await."""
        for _ in range(10):
            await asyncio.sleep(0)

    async def advance(self) -> float:
        """Finish the oldest pending sleep and return its delay."""
        await self.settle()
        for idx, fut in enumerate(self._waiting):
            if not fut.done():
                fut.set_result(None)
                delay = self.delays[idx]
                break
        else:
            raise AssertionError("nothing is sleeping")
        await self.settle()
        return delay


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def state() -> BuilderState:
    return BuilderState()


@pytest.fixture
def events() -> list[LifecycleEvent]:
    return []


@pytest.fixture
def simulator(state: BuilderState, clock: ManualClock, events: list) -> LifecycleSimulator:
    sim = LifecycleSimulator(state, LifecycleTimings(), sleep=clock.sleep)
    sim.subscribe(events.append)
    return sim
