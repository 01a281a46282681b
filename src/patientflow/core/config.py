"""
Configuration loading for PatientFlow.

Settings live in a ``patientflow.toml`` file:

    [store]
    id_counter_start = 1000
    default_page_size = 10

    [seed]
    path = "data/seed.json"

    [logging]
    level = "INFO"
    dir = ".patientflow/logs"

Every table and key is optional; a missing file yields the defaults.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from patientflow.core.errors import ConfigError

DEFAULT_CONFIG_FILE = "patientflow.toml"
CONFIG_ENV_VAR = "PATIENTFLOW_CONFIG"


@dataclass
class StoreConfig:
    """Entity store settings."""

    id_counter_start: int = 1000
    default_page_size: int = 10


@dataclass
class SeedConfig:
    """Seed dataset location. ``None`` selects the bundled dataset."""

    path: Path | None = None


@dataclass
class LoggingConfig:
    """Logging settings. File logging is enabled only when ``dir`` is set."""

    level: str = "INFO"
    dir: Path | None = None

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level.upper())


@dataclass
class PatientFlowConfig:
    """Top-level configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    seed: SeedConfig = field(default_factory=SeedConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Path | None = None


def _expect(table: dict[str, Any], key: str, kind: type, section: str) -> Any:
    value = table.get(key)
    if value is None:
        return None
    # bool is an int subclass; reject it for integer settings
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(
            f"[{section}] {key} must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _table(data: dict[str, Any], name: str) -> dict[str, Any]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{name}] must be a table")
    return table


def parse_config(data: dict[str, Any], base_dir: Path | None = None) -> PatientFlowConfig:
    """
    Build a configuration from already-parsed TOML data.

    Args:
        data: Parsed TOML document
        base_dir: Directory that relative paths are resolved against

    Returns:
        PatientFlowConfig

    Raises:
        ConfigError: If a setting has the wrong type or value
    """
    base_dir = base_dir or Path.cwd()

    store_data = _table(data, "store")
    seed_data = _table(data, "seed")
    logging_data = _table(data, "logging")

    store = StoreConfig()
    counter_start = _expect(store_data, "id_counter_start", int, "store")
    if counter_start is not None:
        store.id_counter_start = counter_start
    page_size = _expect(store_data, "default_page_size", int, "store")
    if page_size is not None:
        if page_size < 1:
            raise ConfigError("[store] default_page_size must be at least 1")
        store.default_page_size = page_size

    seed = SeedConfig()
    seed_path = _expect(seed_data, "path", str, "seed")
    if seed_path:
        path = Path(seed_path)
        seed.path = path if path.is_absolute() else base_dir / path

    log_config = LoggingConfig()
    level = _expect(logging_data, "level", str, "logging")
    if level is not None:
        if not isinstance(logging.getLevelName(level.upper()), int):
            raise ConfigError(f"[logging] level is not a logging level: {level}")
        log_config.level = level.upper()
    log_dir = _expect(logging_data, "dir", str, "logging")
    if log_dir:
        path = Path(log_dir)
        log_config.dir = path if path.is_absolute() else base_dir / path

    return PatientFlowConfig(store=store, seed=seed, logging=log_config)


def load_config(path: Path | str | None = None) -> PatientFlowConfig:
    """
    Load configuration from a TOML file.

    Resolution order: explicit ``path``, then the ``PATIENTFLOW_CONFIG``
    environment variable, then ``patientflow.toml`` in the working directory.
    An explicit path that does not exist is an error; a missing default file
    is not.

    Raises:
        ConfigError: If the file is missing (explicit path), unreadable or malformed
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    config_path = Path(explicit) if explicit else Path.cwd() / DEFAULT_CONFIG_FILE

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return PatientFlowConfig()

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    config = parse_config(data, base_dir=config_path.resolve().parent)
    config.source = config_path
    return config
