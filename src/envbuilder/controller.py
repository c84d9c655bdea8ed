"""EnvironmentController: the single owner of builder state.

update, update_tag, provision and destroy are the only ways to mutate the
BuilderState; the configuration model and the lifecycle simulator both work
on the same state object passed in by reference.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from envbuilder.config import BuilderSettings
from envbuilder.environment import EnvironmentModel, UpdateResult
from envbuilder.lifecycle import Listener, LifecycleSimulator, Sleep
from envbuilder.models import EnvironmentConfig, LifecycleStatus
from envbuilder.notifications import Notifier
from envbuilder.template import DocumentFormat, EnvironmentDocument, load_document


@dataclass
class BuilderState:
    config: EnvironmentConfig = field(default_factory=EnvironmentConfig)
    status: LifecycleStatus = LifecycleStatus.IDLE


class EnvironmentController:
    def __init__(
        self,
        state: BuilderState | None = None,
        settings: BuilderSettings | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.state = state or BuilderState()
        self.settings = settings or BuilderSettings()
        self.environment = EnvironmentModel(self.state)
        self.lifecycle = LifecycleSimulator(self.state, self.settings.timings, sleep=sleep)
        self.notifier = Notifier(ttl=self.settings.notification_ttl)
        self.lifecycle.subscribe(self.notifier.push)

    @classmethod
    def from_document(
        cls, path: Path, settings: BuilderSettings | None = None, **kwargs: Any
    ) -> EnvironmentController:
        """Seed a controller with the config from an exported document."""
        doc = load_document(path)
        return cls(BuilderState(config=doc.spec), settings, **kwargs)

    @property
    def config(self) -> EnvironmentConfig:
        return self.state.config

    @property
    def status(self) -> LifecycleStatus:
        return self.state.status

    def update(self, field: str, value: Any) -> UpdateResult:
        return self.environment.update(field, value)

    def update_tag(self, key: str, value: str) -> UpdateResult:
        return self.environment.update_tag(key, value)

    def provision(self) -> bool:
        return self.lifecycle.provision()

    def destroy(self) -> bool:
        return self.lifecycle.destroy()

    def subscribe(self, listener: Listener):
        return self.lifecycle.subscribe(listener)

    async def wait(self) -> None:
        await self.lifecycle.wait()

    def render(self) -> EnvironmentDocument:
        return self.environment.render()

    def preview(self, fmt: DocumentFormat = "json") -> str:
        return self.environment.preview(fmt)
