"""Tests for BuilderSettings.from_env()."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from envbuilder.config import BuilderSettings, LifecycleTimings

_VARS = [
    "ENVBUILDER_PLAN_DELAY",
    "ENVBUILDER_APPLY_DELAY",
    "ENVBUILDER_DESTROY_DELAY",
    "ENVBUILDER_RESET_DELAY",
    "ENVBUILDER_NOTIFICATION_TTL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    """Without env vars the default timings and ttl apply."""
    settings = BuilderSettings.from_env()
    assert settings.timings == LifecycleTimings()
    assert settings.timings.plan_delay == 1.2
    assert settings.timings.apply_delay == 2.4
    assert settings.timings.destroy_delay == 2.0
    assert settings.timings.reset_delay == 0.8
    assert settings.notification_ttl == 4.0


def test_overrides_from_env(monkeypatch):
    """ENVBUILDER_* variables override individual settings."""
    monkeypatch.setenv("ENVBUILDER_PLAN_DELAY", "0.1")
    monkeypatch.setenv("ENVBUILDER_RESET_DELAY", "0")
    monkeypatch.setenv("ENVBUILDER_NOTIFICATION_TTL", "10")

    settings = BuilderSettings.from_env()
    assert settings.timings.plan_delay == 0.1
    assert settings.timings.reset_delay == 0
    assert settings.timings.apply_delay == 2.4
    assert settings.notification_ttl == 10


@pytest.mark.parametrize(
    ("var", "value"),
    [
        ("ENVBUILDER_APPLY_DELAY", "-1"),
        ("ENVBUILDER_DESTROY_DELAY", "soon"),
        ("ENVBUILDER_NOTIFICATION_TTL", "0"),
    ],
)
def test_invalid_values_rejected(monkeypatch, var, value):
    """Negative, non-numeric or zero-ttl values fail validation."""
    monkeypatch.setenv(var, value)
    with pytest.raises(ValidationError):
        BuilderSettings.from_env()
