"""YAML configuration for the data store and its logger."""

from .loader import ConfigLoadError, load_config
from .models import (
    DataStore,
    DataStoreConfig,
    DataStoreEntry,
    LoggingConfig,
    MongoConfig,
    RedisConfig,
)

__all__ = [
    "ConfigLoadError",
    "load_config",
    "DataStore",
    "DataStoreConfig",
    "DataStoreEntry",
    "LoggingConfig",
    "MongoConfig",
    "RedisConfig",
]
