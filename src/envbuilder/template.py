"""Exportable environment document.

The document wraps an EnvironmentConfig in a small manifest envelope:

    apiVersion: mcp/v1
    kind: Environment
    metadata: {name, tags}
    spec: <EnvironmentConfig, camelCase keys>

It is the artifact handed to a future infrastructure-as-code exporter.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from envbuilder.models import EnvironmentConfig, TagMap

API_VERSION = "mcp/v1"
KIND = "Environment"

DocumentFormat = Literal["json", "yaml"]


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    tags: TagMap = Field(default_factory=dict, validate_default=True)


class EnvironmentDocument(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_version: Literal["mcp/v1"] = Field(default=API_VERSION, alias="apiVersion")
    kind: Literal["Environment"] = KIND
    metadata: DocumentMetadata
    spec: EnvironmentConfig

    @model_validator(mode="after")
    def _metadata_matches_spec(self) -> EnvironmentDocument:
        if self.metadata.name != self.spec.name:
            raise ValueError(
                f"metadata.name {self.metadata.name!r} does not match spec.name {self.spec.name!r}"
            )
        if dict(self.metadata.tags) != dict(self.spec.tags):
            raise ValueError("metadata.tags does not match spec.tags")
        return self

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


def build_document(config: EnvironmentConfig) -> EnvironmentDocument:
    """Wrap a config in the exportable document envelope."""
    return EnvironmentDocument(
        metadata=DocumentMetadata(name=config.name, tags=dict(config.tags)),
        spec=config,
    )


def dump_document(doc: EnvironmentDocument, fmt: DocumentFormat = "json") -> str:
    """Serialize a document as JSON (2-space indent) or YAML."""
    data = doc.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    raise ValueError(f"Unknown document format: {fmt}")


def load_document(path: Path) -> EnvironmentDocument:
    """Parse a YAML or JSON document file into an EnvironmentDocument."""
    raw = yaml.safe_load(path.read_text())
    return EnvironmentDocument.model_validate(raw)


def write_document(path: Path, doc: EnvironmentDocument, fmt: DocumentFormat | None = None) -> Path:
    """Write a document to *path*, picking the format from the suffix if not given."""
    if fmt is None:
        fmt = "yaml" if path.suffix in (".yaml", ".yml") else "json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_document(doc, fmt))
    return path
