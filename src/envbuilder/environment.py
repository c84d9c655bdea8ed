"""Configuration model: field-level updates over an EnvironmentConfig.

Every update builds a candidate config and validates it as a whole. A
candidate that fails validation is reported back as an UpdateResult and the
current config is left untouched; the model never holds an invalid config.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError

from envbuilder.models import EnvironmentConfig, check_tag_key
from envbuilder.template import DocumentFormat, EnvironmentDocument, build_document, dump_document

if TYPE_CHECKING:
    from envbuilder.controller import BuilderState

logger = logging.getLogger(__name__)


class ValidationIssue(BaseModel):
    field: str
    message: str


class InvalidUpdate(ValueError):
    """Raised by UpdateResult.raise_for_error() for a rejected update."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__("; ".join(f"{i.field}: {i.message}" for i in issues))


class UpdateResult(BaseModel):
    """Outcome of update() / update_tag()."""

    ok: bool
    config: EnvironmentConfig  # config after the call (unchanged on failure)
    errors: list[ValidationIssue] = Field(default_factory=list)

    def raise_for_error(self) -> EnvironmentConfig:
        if not self.ok:
            raise InvalidUpdate(self.errors)
        return self.config


def _field_names() -> dict[str, str]:
    """Map both snake_case names and camelCase aliases to the field name."""
    names: dict[str, str] = {}
    for name, info in EnvironmentConfig.model_fields.items():
        names[name] = name
        if info.alias:
            names[info.alias] = name
    return names


_FIELDS = _field_names()


def _issues_from(exc: ValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            field=".".join(str(part) for part in err["loc"]) or "config",
            message=err["msg"],
        )
        for err in exc.errors()
    ]


class EnvironmentModel:
    """Holds the desired-state record inside a BuilderState and exposes updates."""

    def __init__(self, state: BuilderState) -> None:
        self._state = state
        self._rendered: tuple[EnvironmentConfig, EnvironmentDocument] | None = None

    @property
    def config(self) -> EnvironmentConfig:
        return self._state.config

    def update(self, field: str, value: Any) -> UpdateResult:
        """Replace one top-level field wholesale."""
        name = _FIELDS.get(field)
        if name is None:
            return self._reject([ValidationIssue(field=field, message="unknown field")])

        if isinstance(value, BaseModel):
            value = value.model_dump()
        data = self.config.model_dump()
        data[name] = value
        return self._apply(data, changed=name)

    def update_tag(self, key: str, value: str) -> UpdateResult:
        """Insert or overwrite a single tag. Tags are never removed."""
        try:
            check_tag_key(key)
        except ValueError as exc:
            return self._reject([ValidationIssue(field=f"tags.{key}", message=str(exc))])

        data = self.config.model_dump()
        data["tags"] = {**data["tags"], key: value}
        return self._apply(data, changed=f"tags.{key}")

    def render(self) -> EnvironmentDocument:
        """Return the document for the current config, memoized on the config object."""
        config = self.config
        if self._rendered is None or self._rendered[0] is not config:
            self._rendered = (config, build_document(config))
        return self._rendered[1]

    def preview(self, fmt: DocumentFormat = "json") -> str:
        return dump_document(self.render(), fmt)

    def _apply(self, data: dict, *, changed: str) -> UpdateResult:
        try:
            config = EnvironmentConfig.model_validate(data)
        except ValidationError as exc:
            return self._reject(_issues_from(exc))

        self._state.config = config
        logger.debug("updated %s", changed)
        return UpdateResult(ok=True, config=config)

    def _reject(self, issues: list[ValidationIssue]) -> UpdateResult:
        for issue in issues:
            logger.info("rejected update to %s: %s", issue.field, issue.message)
        return UpdateResult(ok=False, config=self.config, errors=issues)
