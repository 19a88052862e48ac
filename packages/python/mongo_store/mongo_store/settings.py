"""Configuration for ``MongoStore`` instances.

A ``StoreSettings`` is built once when a store is constructed and never changes
afterwards. Values not passed explicitly fall back to ``CHUX_MONGO_*``
environment variables (or a ``.env`` file) and then to the defaults below.
"""
from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_TIMEOUT_SECONDS = 30.0


class StoreSettings(BaseSettings):
    """Connection URI, per-operation timeout and default names for a store."""

    model_config = SettingsConfigDict(
        env_prefix="CHUX_MONGO_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    uri: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    database_name: str = ""
    collection_name: str = ""

    @field_validator("timeout")
    @classmethod
    def _default_timeout(cls, value: float) -> float:
        # zero means "not configured"
        if value <= 0:
            return DEFAULT_TIMEOUT_SECONDS
        return value

    @property
    def effective_uri(self) -> str:
        return self.uri or DEFAULT_URI
