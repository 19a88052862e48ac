"""Read ``config.yaml`` into a ``DataStoreConfig``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from loguru import logger
from pydantic import ValidationError

from mongo_store import DataStoreError

from .models import DataStoreConfig

CONFIG_FILE_NAMES = ("config.yaml", "config.yml")

CODE_CONFIG_READ = 1100
CODE_CONFIG_PARSE = 1101
CODE_CONFIG_VALIDATE = 1102


class ConfigLoadError(DataStoreError):
    """The configuration file is missing, unreadable or invalid."""


def _resolve(config_path: str | Path) -> Path:
    path = Path(config_path).expanduser()
    if not path.is_dir():
        return path
    for name in CONFIG_FILE_NAMES:
        candidate = path / name
        if candidate.is_file():
            return candidate
    raise ConfigLoadError(f"failed to read the configuration file: no config.yaml in {path}", CODE_CONFIG_READ)


def load_config(config_path: str | Path) -> DataStoreConfig:
    """Load a directory's ``config.yaml`` (or the given file)."""

    path = _resolve(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"failed to read the configuration file {path}", CODE_CONFIG_READ, exc) from exc

    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"failed to parse the configuration file {path}", CODE_CONFIG_PARSE, exc) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(
            f"failed to parse the configuration file {path}: expected a mapping, got {type(data).__name__}",
            CODE_CONFIG_PARSE,
        )

    try:
        config = DataStoreConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"failed to unmarshal the configuration {path}", CODE_CONFIG_VALIDATE, exc) from exc

    logger.debug("Loaded configuration from {path} ({count} data store(s))", path=path, count=len(config.data_stores))
    return config
