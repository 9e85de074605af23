"""Configuration for label sync.

Two sources:
- environment variables and a local `.env` file (credentials, logging, defaults)
- a YAML file describing the desired labels for an owner

To avoid collisions with other tools that may also use `GITHUB_TOKEN`, this
project uses a dedicated token variable: `LABEL_SYNC_GITHUB_TOKEN`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from github_label_sync.labels import Label, LabelSet
from github_label_sync.logging import LogLevel, normalize_level


class ConfigError(Exception):
    """Raised when the desired-state file cannot be loaded or is invalid."""


class LabelSyncSettings(BaseSettings):
    """Settings loaded from the environment.

    Environment variables:
    - LABEL_SYNC_GITHUB_TOKEN
    - GITHUB_BASE_URL                (optional)
    - LOG_LEVEL                      (optional)
    - LABEL_SYNC_CONFIG              (optional)
    - LABEL_SYNC_FETCH_ERROR_POLICY  (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `LabelSyncSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="LABEL_SYNC_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: LogLevel = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level (DEBUG, INFO, WARNING, ERROR or CRITICAL)",
    )

    config_path: Path = Field(
        default=Path("labels.yaml"),
        validation_alias="LABEL_SYNC_CONFIG",
        description="Path to the desired labels file",
    )

    fetch_error_policy: Literal["abort", "empty"] = Field(
        default="abort",
        validation_alias="LABEL_SYNC_FETCH_ERROR_POLICY",
        description=(
            "What to do when existing labels cannot be listed: 'abort' skips the "
            "repository, 'empty' reconciles against an empty snapshot"
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return normalize_level(value)

    @model_validator(mode="after")
    def _require_github_auth(self) -> LabelSyncSettings:
        if not self.github_token.strip():
            raise ValueError("LABEL_SYNC_GITHUB_TOKEN is required")
        return self


def _validate_host(value: str) -> str:
    parsed = urlparse(value.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"host must be an absolute http(s) URL, got {value!r}")
    return value.strip()


class LabelDefinition(BaseModel):
    """One desired label as written in the config file."""

    name: str = Field(min_length=1)
    color: str = Field(min_length=1)
    description: str | None = Field(default=None)

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: object) -> object:
        # GitHub stores colors lowercase without a leading '#'.
        if isinstance(value, str):
            return value.strip().lstrip("#").lower()
        return value

    def to_label(self) -> Label:
        return Label(name=self.name, color=self.color, description=self.description)


class LabelsConfig(BaseModel):
    """Desired state for one owner's repositories."""

    owner: str = Field(min_length=1)
    host: str | None = Field(
        default=None,
        description="API base URL; overrides GITHUB_BASE_URL when set",
    )
    repos: list[str] = Field(default_factory=list)
    labels: list[LabelDefinition] = Field(default_factory=list)

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _validate_host(value)

    def desired(self) -> LabelSet:
        return LabelSet(definition.to_label() for definition in self.labels)

    def base_url(self, settings: LabelSyncSettings) -> str:
        """Return the API base URL, preferring the file's `host`."""

        if self.host is not None:
            return self.host
        try:
            return _validate_host(settings.github_base_url)
        except ValueError as e:
            raise ConfigError(f"Invalid GITHUB_BASE_URL: {e}") from e


def load_labels_config(path: Path) -> LabelsConfig:
    """Load and validate a desired-state YAML file.

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or fails validation.
    """

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Unable to read labels config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Labels config {path} is not valid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Labels config {path} must be a mapping")

    try:
        return LabelsConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid labels config {path}:\n{e}") from e
