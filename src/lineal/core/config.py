"""
Lineal configuration.

Settings live in ``~/.lineal/config.toml`` (or ``$LINEAL_CONFIG``)::

    config_version = 1

    [storage]
    backend = "sqlite"          # sqlite | file | memory
    path = ""                   # empty → ~/.lineal/lineal.db (or data/ for "file")

    [logging]
    level = "INFO"
    format = "text"             # text | json
    file = ""

    [audit]
    max_entries = 1000

    [seed]
    super_admin_email = "superadmin@bjmp.gov.ph"
    admin_email = "admin@bjmp.gov.ph"
    personnel_file = ""         # YAML seed document

A missing file means built-in defaults. ``LINEAL_*`` environment
variables override individual keys.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from lineal.core.constants import (
    AUDIT_LOG_MAX_ENTRIES,
    CONFIG_FILENAME,
    DATA_DIRNAME,
    DB_FILENAME,
    DEFAULT_ADMIN_EMAIL,
    DEFAULT_PASSWORD,
    DEFAULT_SUPER_ADMIN_EMAIL,
    LINEAL_DIR_NAME,
)
from lineal.core.exceptions import ConfigError, ConfigNotFoundError

# Keys never written back to disk by save_config
_SECRET_FIELDS = {"seed": {"default_password"}}

# LINEAL_* variable -> (section, key, type)
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "LINEAL_STORAGE_BACKEND": ("storage", "backend", str),
    "LINEAL_DB_PATH": ("storage", "path", str),
    "LINEAL_LOG_LEVEL": ("logging", "level", str),
    "LINEAL_LOG_FORMAT": ("logging", "format", str),
    "LINEAL_AUDIT_MAX_ENTRIES": ("audit", "max_entries", int),
}


def lineal_dir() -> Path:
    """The data directory, ``$LINEAL_HOME`` or ``~/.lineal`` (created 0700)."""
    env_home = os.environ.get("LINEAL_HOME")
    d = Path(env_home).expanduser() if env_home else Path.home() / LINEAL_DIR_NAME
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


class StorageConfig(BaseModel):
    backend: Literal["sqlite", "file", "memory"] = "sqlite"
    path: str = ""

    @field_validator("backend", mode="before")
    @classmethod
    def lower_backend(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"
    file: str = ""

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        name = v.strip().upper()
        if name not in logging.getLevelNamesMapping() or name == "NOTSET":
            raise ValueError(f"unknown log level {v!r}")
        return name

    @field_validator("format", mode="before")
    @classmethod
    def lower_format(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class AuditConfig(BaseModel):
    max_entries: int = Field(default=AUDIT_LOG_MAX_ENTRIES, ge=1)


class SeedConfig(BaseModel):
    super_admin_email: str = DEFAULT_SUPER_ADMIN_EMAIL
    admin_email: str = DEFAULT_ADMIN_EMAIL
    default_password: SecretStr = SecretStr(DEFAULT_PASSWORD)
    personnel_file: str = ""


class LinealConfig(BaseModel):
    config_version: int = 1
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)

    # Where this config was loaded from; not part of the file
    _config_path: Path | None = None

    @property
    def storage_path(self) -> Path:
        """Database file (sqlite) or directory (file) the backend opens."""
        if self.storage.path:
            return Path(self.storage.path).expanduser()
        name = DATA_DIRNAME if self.storage.backend == "file" else DB_FILENAME
        return lineal_dir() / name

    @property
    def log_path(self) -> Path | None:
        return Path(self.logging.file).expanduser() if self.logging.file else None


def _config_file_path() -> Path:
    env_path = os.environ.get("LINEAL_CONFIG")
    return Path(env_path) if env_path else lineal_dir() / CONFIG_FILENAME


def _read_toml(path: Path) -> dict[str, Any]:
    import tomllib

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    for var, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = os.environ.get(var)
        if not raw:
            continue
        try:
            value = cast(raw)
        except ValueError as exc:
            raise ConfigError(f"{var} must be {cast.__name__}: {raw!r}") from exc
        data.setdefault(section, {})[key] = value


def load_config(path: Path | None = None, *, required: bool = False) -> LinealConfig:
    """
    Build the effective configuration.

    Environment variables win over the file, the file wins over defaults.
    With *required*, a missing file raises :class:`ConfigNotFoundError`.
    """
    cfg_path = path or _config_file_path()

    if cfg_path.exists():
        data = _read_toml(cfg_path)
    elif required:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")
    else:
        data = {}

    _apply_env_overrides(data)

    try:
        config = LinealConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def save_config(config: LinealConfig | dict[str, Any], path: Path | None = None) -> Path:
    """
    Write *config* as TOML, readable by the owner only.

    Secrets on a :class:`LinealConfig` are left out; a plain dict is
    written as given.
    """
    import tomli_w

    if isinstance(config, LinealConfig):
        data = config.model_dump(exclude=_SECRET_FIELDS)
    else:
        data = config

    cfg_path = path or _config_file_path()
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            tomli_w.dump(data, f)
        os.replace(tmp_path, cfg_path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc
    cfg_path.chmod(0o600)
    return cfg_path
