"""Multi-cloud environment builder: config model, exportable document, lifecycle simulator."""

from envbuilder.controller import BuilderState, EnvironmentController
from envbuilder.environment import EnvironmentModel, InvalidUpdate, UpdateResult
from envbuilder.lifecycle import LifecycleSimulator
from envbuilder.models import EnvironmentConfig, LifecycleEvent, LifecycleStatus

__all__ = [
    "BuilderState",
    "EnvironmentConfig",
    "EnvironmentController",
    "EnvironmentModel",
    "InvalidUpdate",
    "LifecycleEvent",
    "LifecycleSimulator",
    "LifecycleStatus",
    "UpdateResult",
]
