"""Generic MongoDB document store.

Example usage:

    from pydantic import Field
    from mongo_store import MongoDocument, MongoStore

    class Person(MongoDocument):
        first_name: str = Field(alias="firstName")
        last_name: str = Field(alias="lastName")

    store = MongoStore(database_name="testdb", collection_name="people")
    person = store.create(Person(first_name="John", last_name="Doe"))
    does = store.query(Person.model_construct(), "lastName", "Doe")
"""

from .connection import ConnectionPool, default_pool
from .document import (
    NIL_OBJECT_ID,
    DocumentId,
    MongoDocument,
    StorableDocument,
    get_field_value,
    is_unset_id,
    parse_object_id,
)
from .errors import (
    DataStoreError,
    DocumentNotFoundError,
    StoreConfigurationError,
    StoreConnectionError,
    StoreDecodeError,
    StoreIndexError,
    StoreLookupError,
    StoreValidationError,
    StoreWriteError,
    UnknownFieldError,
)
from .settings import DEFAULT_URI, StoreSettings
from .store import MongoStore

__all__ = [
    "ConnectionPool",
    "default_pool",
    "NIL_OBJECT_ID",
    "DocumentId",
    "MongoDocument",
    "StorableDocument",
    "get_field_value",
    "is_unset_id",
    "parse_object_id",
    "DataStoreError",
    "DocumentNotFoundError",
    "StoreConfigurationError",
    "StoreConnectionError",
    "StoreDecodeError",
    "StoreIndexError",
    "StoreLookupError",
    "StoreValidationError",
    "StoreWriteError",
    "UnknownFieldError",
    "DEFAULT_URI",
    "StoreSettings",
    "MongoStore",
]
