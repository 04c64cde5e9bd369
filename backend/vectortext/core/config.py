"""Settings for the message store, indexer and search."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "VTXT_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/vectortext/config.yaml")
DEFAULT_DB_PATH = Path("~/.vectortext/messages.db")

# YAML section -> {key in section -> Settings field}
_SECTION_FIELDS: Mapping[str, Mapping[str, str]] = {
    "storage": {"db_path": "db_path"},
    "indexing": {"batch_size": "write_batch_size", "progress_interval": "progress_interval"},
    "search": {"batch_size": "read_batch_size", "snippet_length": "snippet_length"},
}


class Settings(BaseModel):
    """Tunables for storage, indexing and search.

    Precedence is defaults, then the YAML file, then ``VTXT_<FIELD>``
    environment variables.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    db_path: Path = Field(default_factory=lambda: DEFAULT_DB_PATH.expanduser())
    read_batch_size: int = Field(default=50, ge=1, description="Rows fetched per page by the similarity scan")
    write_batch_size: int = Field(default=100, ge=1, description="Messages embedded between cancellation checks")
    progress_interval: int = Field(default=10, ge=1, description="Processed messages between progress reports")
    snippet_length: int = Field(default=200, ge=1, description="Characters of message body shown per hit")

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Path:
        if not isinstance(value, (str, Path)):
            raise TypeError("db_path must be a path or string")
        return Path(value).expanduser()

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        data = _read_config(_config_path(path))
        data.update(_env_overrides())
        return cls(**data)


def _config_path(explicit: Path | None) -> Path | None:
    if explicit is not None:
        return explicit.expanduser()
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    default = DEFAULT_CONFIG_PATH.expanduser()
    return default if default.exists() else None


def _read_config(path: Path | None) -> dict[str, Any]:
    """Translate the sectioned YAML layout into Settings keyword arguments."""
    if path is None or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"{path}: expected a mapping at the top level")

    data = {key: value for key, value in raw.items() if key in Settings.model_fields}
    for section, fields in _SECTION_FIELDS.items():
        values = raw.get(section) or {}
        if not isinstance(values, Mapping):
            raise ValueError(f"{path}: section '{section}' must be a mapping")
        for key, field_name in fields.items():
            if key in values:
                data[field_name] = values[key]
    return data


def _env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for field_name in Settings.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings", "ENV_PREFIX", "CONFIG_ENV_VAR"]
