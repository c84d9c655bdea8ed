"""Builder settings loaded from environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field


class LifecycleTimings(BaseModel):
    """Delays (seconds) between simulated lifecycle stages."""

    plan_delay: float = Field(default=1.2, ge=0)
    apply_delay: float = Field(default=2.4, ge=0)
    destroy_delay: float = Field(default=2.0, ge=0)
    reset_delay: float = Field(default=0.8, ge=0)


class BuilderSettings(BaseModel):
    """All builder settings, loaded from environment variables."""

    timings: LifecycleTimings = Field(default_factory=LifecycleTimings)
    notification_ttl: float = Field(default=4.0, gt=0, description="Seconds a notification stays visible")

    @classmethod
    def from_env(cls) -> BuilderSettings:
        """Load settings from ENVBUILDER_* environment variables, falling back to defaults."""
        timing_vars = {
            "plan_delay": "ENVBUILDER_PLAN_DELAY",
            "apply_delay": "ENVBUILDER_APPLY_DELAY",
            "destroy_delay": "ENVBUILDER_DESTROY_DELAY",
            "reset_delay": "ENVBUILDER_RESET_DELAY",
        }
        timings = {
            name: os.environ[var] for name, var in timing_vars.items() if os.environ.get(var)
        }

        kwargs: dict = {"timings": LifecycleTimings.model_validate(timings)}
        ttl = os.environ.get("ENVBUILDER_NOTIFICATION_TTL")
        if ttl:
            kwargs["notification_ttl"] = ttl
        return cls.model_validate(kwargs)
