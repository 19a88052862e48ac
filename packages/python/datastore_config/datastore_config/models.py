"""Pydantic models mirroring the YAML configuration file."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from file_logger import LogLevel
from mongo_store import StoreSettings


class LoggingConfig(BaseModel):
    level: str = "info"


class MongoConfig(BaseModel):
    """One ``mongo`` section; empty values fall back to the store defaults."""

    model_config = ConfigDict(populate_by_name=True)

    uri: str = ""
    timeout: float = 0
    database_name: str = Field(default="", alias="databaseName")
    collection_name: str = Field(default="", alias="collectionName")

    def to_store_settings(self) -> StoreSettings:
        return StoreSettings(
            uri=self.uri,
            timeout=self.timeout,
            database_name=self.database_name,
            collection_name=self.collection_name,
        )


class RedisConfig(BaseModel):
    uri: str = ""


class DataStore(BaseModel):
    mongo: Optional[MongoConfig] = None
    redis: Optional[RedisConfig] = None


class DataStoreEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data_store: DataStore = Field(default_factory=DataStore, alias="dataStore")


class DataStoreConfig(BaseModel):
    """
    Root configuration.

    Usually an application embeds this section in its own config file and
    hands it over; ``load_config`` exists for standalone use.
    """

    model_config = ConfigDict(populate_by_name=True)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    data_stores: List[DataStoreEntry] = Field(default_factory=list, alias="DataStores")

    def mongo_configs(self) -> List[MongoConfig]:
        return [entry.data_store.mongo for entry in self.data_stores if entry.data_store.mongo is not None]

    def first_mongo(self) -> Optional[MongoConfig]:
        configs = self.mongo_configs()
        return configs[0] if configs else None

    def log_level(self) -> LogLevel:
        return LogLevel.parse(self.logging.level)
