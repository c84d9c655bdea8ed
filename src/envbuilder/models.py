"""Data models for environment configs and lifecycle events."""

from __future__ import annotations

import enum
import ipaddress
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

TAG_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:/=+@-]{0,127}$")


class Provider(enum.StrEnum):
    AWS = "aws"
    GCP = "gcp"
    AZURE = "azure"
    KUBERNETES = "kubernetes"


class Orchestrator(enum.StrEnum):
    KUBERNETES = "kubernetes"
    VM = "vm"


class DatabaseEngine(enum.StrEnum):
    POSTGRES = "postgres"
    MYSQL = "mysql"


class DatabaseTier(enum.StrEnum):
    DEV = "dev"
    PROD = "prod"


class DatabaseSize(enum.StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Exposure(enum.StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class _SpecModel(BaseModel):
    """Frozen base for config sections; serializes with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


class NetworkConfig(_SpecModel):
    vpc_cidr: str = "10.0.0.0/16"
    public_subnets: int = Field(default=2, ge=1, le=6)
    private_subnets: int = Field(default=2, ge=0, le=6)

    @field_validator("vpc_cidr")
    @classmethod
    def _check_cidr(cls, value: str) -> str:
        value = value.strip()
        if "/" not in value:
            raise ValueError("CIDR block needs an explicit prefix length, e.g. 10.0.0.0/16")
        try:
            network = ipaddress.ip_network(value, strict=True)
        except ValueError as exc:
            raise ValueError(f"invalid CIDR block {value!r}: {exc}") from exc
        return str(network)


class ComputeConfig(_SpecModel):
    orchestrator: Orchestrator = Orchestrator.KUBERNETES
    instance_type: str = Field(default="t3.medium", min_length=1)
    node_count: int = Field(default=3, ge=1, le=50)
    autoscaling: bool = True


class DatabaseConfig(_SpecModel):
    engine: DatabaseEngine = DatabaseEngine.POSTGRES
    tier: DatabaseTier = DatabaseTier.DEV
    size: DatabaseSize = DatabaseSize.SMALL


class LoadBalancerConfig(_SpecModel):
    exposure: Exposure = Exposure.PUBLIC


class OptionsConfig(_SpecModel):
    monitoring: bool = True
    logging: bool = True


def _default_tags() -> dict[str, str]:
    return {"project": "mcp", "env": "demo"}


def _freeze_tags(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


# Read-only view; dumps back to a plain dict.
TagMap = Annotated[
    Mapping[str, str],
    AfterValidator(_freeze_tags),
    PlainSerializer(dict, return_type=dict[str, str]),
]


class EnvironmentConfig(_SpecModel):
    """Desired state of a single environment."""

    name: str = Field(default="mcp-demo", min_length=1)
    provider: Provider = Provider.AWS
    region: str = "us-east-1"
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    compute: ComputeConfig = Field(default_factory=ComputeConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    load_balancer: LoadBalancerConfig = Field(default_factory=LoadBalancerConfig)
    options: OptionsConfig = Field(default_factory=OptionsConfig)
    tags: TagMap = Field(default_factory=_default_tags, validate_default=True)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _check_tag_keys(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        for key in value:
            check_tag_key(key)
        return value


def check_tag_key(key: str) -> str:
    """Raise ValueError unless *key* is usable as a resource tag key."""
    if not TAG_KEY_PATTERN.match(key):
        raise ValueError(
            f"invalid tag key {key!r}: use 1-128 characters, starting with a letter or digit"
        )
    return key


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class LifecycleStatus(enum.StrEnum):
    """Phase of an environment's simulated existence."""

    IDLE = "idle"
    PLANNING = "planning"
    APPLYING = "applying"
    DEPLOYED = "deployed"
    DESTROYING = "destroying"
    DESTROYED = "destroyed"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def busy(self) -> bool:
        """True while a provision or destroy pipeline owns the status."""
        return self in (
            LifecycleStatus.PLANNING,
            LifecycleStatus.APPLYING,
            LifecycleStatus.DESTROYING,
        )


class EventKind(enum.StrEnum):
    PROVISIONING_STARTED = "provisioning-started"
    APPLYING_PLAN = "applying-plan"
    ENVIRONMENT_DEPLOYED = "environment-deployed"
    DESTROYING_STARTED = "destroying-started"
    ALL_DESTROYED = "all-destroyed"
    ENVIRONMENT_RESET = "environment-reset"


class EventLevel(enum.StrEnum):
    INFO = "info"
    SUCCESS = "success"


class LifecycleEvent(BaseModel):
    """Emitted on every lifecycle transition."""

    kind: EventKind
    status: LifecycleStatus
    title: str
    description: str = ""
    level: EventLevel = EventLevel.INFO
    silent: bool = False  # not surfaced as a notification
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
