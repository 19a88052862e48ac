"""Generic CRUD over any ``MongoDocument``.

Example::

    store = MongoStore(
        uri="mongodb://localhost:27017",
        timeout=5,
        database_name="testdb",
        collection_name="testcol",
    )
    person = Person(first_name="John", last_name="Doe")
    store.create(person)
    same = store.get_by_id(Person.model_construct(), str(person.id))

Every network call runs under ``pymongo.timeout(settings.timeout)``. Nothing is
retried; failures surface as ``DataStoreError`` subclasses.
"""

from __future__ import annotations

from itertools import chain
from typing import Any, Dict, Iterable, List, Optional, Tuple, TypeVar

import pymongo
from bson import ObjectId
from bson.errors import BSONError
from loguru import logger
from pydantic import ValidationError
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .connection import ConnectionPool, default_pool
from .document import MongoDocument, get_field_value, is_unset_id, parse_object_id
from .errors import (
    CODE_CONFIGURATION,
    CODE_CREATE,
    CODE_DELETE,
    CODE_GET_ALL,
    CODE_GET_BY_ID,
    CODE_INDEX,
    CODE_QUERY,
    CODE_UPDATE,
    CODE_UPSERT,
    DocumentNotFoundError,
    StoreConfigurationError,
    StoreDecodeError,
    StoreIndexError,
    StoreLookupError,
    StoreValidationError,
    StoreWriteError,
)
from .settings import StoreSettings

D = TypeVar("D", bound=MongoDocument)

_DECODE_ERRORS = (ValidationError, BSONError, TypeError, ValueError)


class MongoStore:
    """Connection-managed document store with per-document name overrides."""

    def __init__(
        self,
        settings: Optional[StoreSettings] = None,
        *,
        pool: Optional[ConnectionPool] = None,
        **options: Any,
    ):
        if settings is None:
            settings = StoreSettings(**options)
        elif options:
            settings = StoreSettings(**{**settings.model_dump(), **options})
        self.settings = settings
        self.pool = pool or default_pool

    @classmethod
    def from_config(cls, mongo_config: Any, *, pool: Optional[ConnectionPool] = None) -> "MongoStore":
        """Build a store from a ``datastore_config.MongoConfig`` section."""

        return cls(mongo_config.to_store_settings(), pool=pool)

    # ------------------------------------------------------------------ connection
    def connect(self, uri: Optional[str] = None) -> MongoClient:
        """Return the shared client, creating it on first use."""

        return self.pool.get_client(uri or self.settings.effective_uri, self.settings.timeout)

    def _names(self, doc: MongoDocument) -> Tuple[str, str]:
        collection_name = doc.get_collection_name() or self.settings.collection_name
        database_name = doc.get_database_name() or self.settings.database_name
        if not collection_name or not database_name:
            raise StoreConfigurationError(
                f"Unable to resolve collection/database for {type(doc).__name__} "
                f"(collection={collection_name!r}, database={database_name!r}).",
                CODE_CONFIGURATION,
            )
        return collection_name, database_name

    def _collection(self, doc: MongoDocument) -> Collection:
        collection_name, database_name = self._names(doc)
        client = self.connect(doc.get_uri() or None)
        return client[database_name][collection_name]

    def _timeout(self):
        return pymongo.timeout(self.settings.timeout)

    # ------------------------------------------------------------------ create
    def create(self, doc: D) -> D:
        """Insert ``doc`` and write the generated identity back onto it."""

        collection = self._collection(doc)
        try:
            with self._timeout():
                result = collection.insert_one(doc.to_document())
        except PyMongoError as exc:
            raise StoreWriteError(
                "Create() failed to insert document. Check the inner error.",
                CODE_CREATE,
                exc,
            ) from exc

        if isinstance(result.inserted_id, ObjectId):
            doc.set_id(result.inserted_id)
        logger.info(
            "Inserted {doc_type} with id {id} into {collection}",
            doc_type=type(doc).__name__,
            id=result.inserted_id,
            collection=collection.full_name,
        )
        return doc

    # ------------------------------------------------------------------ upsert
    def _upsert_filter(self, doc: MongoDocument, filter_fields: Tuple[str, ...]) -> Dict[str, Any]:
        if not filter_fields:
            return {"_id": doc.get_id()}
        return {name: get_field_value(doc, name) for name in filter_fields}

    def upsert(self, doc: D, *filter_fields: str) -> D:
        """Insert ``doc`` if nothing matches the filter, else replace the match.

        The filter is identity equality, or the current values of the given
        serialization tags. The lookup and the write are two round trips; a
        concurrent writer can slip in between them.
        """

        query = self._upsert_filter(doc, filter_fields)
        collection = self._collection(doc)

        try:
            with self._timeout():
                existing = collection.find_one(query)
        except PyMongoError as exc:
            raise StoreLookupError(
                "Upsert() failed to check for an existing document. Check the inner error.",
                CODE_UPSERT,
                exc,
            ) from exc

        if is_unset_id(doc.get_id()):
            if existing is None:
                doc.set_id(ObjectId())
                logger.debug("Upsert minted id {id} for {doc_type}", id=doc.get_id(), doc_type=type(doc).__name__)
            elif isinstance(existing.get("_id"), ObjectId):
                doc.set_id(existing["_id"])
            if not filter_fields:
                query = {"_id": doc.get_id()}

        try:
            with self._timeout():
                result = collection.replace_one(query, doc.to_document(), upsert=True)
        except PyMongoError as exc:
            raise StoreWriteError(
                "Upsert() failed to write document. Check the inner error.",
                CODE_UPSERT,
                exc,
            ) from exc

        logger.debug(
            "Upsert {doc_type}: matched={matched} modified={modified} upserted={upserted}",
            doc_type=type(doc).__name__,
            matched=result.matched_count,
            modified=result.modified_count,
            upserted=result.upserted_id,
        )
        return doc

    # ------------------------------------------------------------------ reads
    def get_by_id(self, doc: D, id: Any) -> D:
        """Load the document with identity ``id`` into ``doc``."""

        object_id = parse_object_id(id, CODE_GET_BY_ID)
        collection = self._collection(doc)
        try:
            with self._timeout():
                raw = collection.find_one({"_id": object_id})
        except PyMongoError as exc:
            raise StoreLookupError("GetByID failed. Check the inner error.", CODE_GET_BY_ID, exc) from exc

        if raw is None:
            raise DocumentNotFoundError(f"Document {object_id} not found.", CODE_GET_BY_ID)

        try:
            loaded = type(doc).from_document(raw)
        except _DECODE_ERRORS as exc:
            raise StoreDecodeError(
                f"GetByID failed to decode document {object_id}. Check the inner error.",
                CODE_GET_BY_ID,
                exc,
            ) from exc
        doc.assign_from(loaded)
        return doc

    def _decode_all(self, doc: MongoDocument, records: Iterable[Any], code: int, operation: str) -> List[Any]:
        doc_type = type(doc)
        docs: List[Any] = []
        for raw in records:
            try:
                docs.append(doc_type.from_document(raw))
            except _DECODE_ERRORS as exc:
                raise StoreDecodeError(
                    f"{operation}() failed to decode document. Check the inner error.",
                    code,
                    exc,
                ) from exc
        return docs

    def query(self, doc: D, *kv_pairs: Any) -> List[D]:
        """Find documents matching alternating field/value pairs.

        Later pairs for the same field win. When the find cannot start (the
        first batch fails) the result is an empty list, the same as "no
        matches"; only a warning is logged.
        """

        if len(kv_pairs) % 2 != 0:
            raise StoreValidationError(
                "Query() requires an even number of arguments for key-value pairs.",
                CODE_QUERY,
            )
        query: Dict[str, Any] = {}
        for key, value in zip(kv_pairs[0::2], kv_pairs[1::2]):
            if not isinstance(key, str):
                raise StoreValidationError(
                    f"Query() expects keys to be of type string, got {type(key).__name__}.",
                    CODE_QUERY,
                )
            query[key] = value

        collection = self._collection(doc)
        with self._timeout():
            try:
                cursor = collection.find(query)
                first = next(cursor, None)
            except PyMongoError as exc:
                logger.warning(
                    "Query() could not start find on {collection}: {error}",
                    collection=collection.full_name,
                    error=exc,
                )
                return []
            try:
                if first is None:
                    return []
                return self._decode_all(doc, chain([first], cursor), CODE_QUERY, "Query")
            except PyMongoError as exc:
                raise StoreLookupError("Query() cursor error. Check the inner error.", CODE_QUERY, exc) from exc
            finally:
                cursor.close()

    def get_all(self, doc: D) -> List[D]:
        """Return every document in the resolved collection (possibly none)."""

        collection = self._collection(doc)
        try:
            with self._timeout():
                cursor = collection.find({})
                try:
                    return self._decode_all(doc, cursor, CODE_GET_ALL, "GetAll")
                finally:
                    cursor.close()
        except PyMongoError as exc:
            raise StoreLookupError("GetAll() failed to find documents. Check the inner error.", CODE_GET_ALL, exc) from exc

    # ------------------------------------------------------------------ writes
    def update(self, doc: MongoDocument, id: Any) -> None:
        """Overwrite every field of the document ``id`` with ``doc``'s values.

        Matching nothing is not an error; the counts are only logged.
        """

        object_id = parse_object_id(id, CODE_UPDATE)
        collection = self._collection(doc)
        fields = doc.to_document()
        fields.pop("_id", None)
        try:
            with self._timeout():
                result = collection.update_one({"_id": object_id}, {"$set": fields})
        except PyMongoError as exc:
            raise StoreWriteError("Update() failed to update. Check the inner error.", CODE_UPDATE, exc) from exc

        if result.matched_count == 0:
            logger.warning("Update() matched no document with id {id}", id=object_id)
        logger.info("Updated {count} document(s)", count=result.modified_count)

    def delete(self, doc: MongoDocument, id: Any) -> None:
        """Delete the document ``id``; deleting nothing is not an error."""

        collection = self._collection(doc)
        object_id = parse_object_id(id, CODE_DELETE)
        try:
            with self._timeout():
                result = collection.delete_one({"_id": object_id})
        except PyMongoError as exc:
            raise StoreWriteError("Delete() failed to delete. Check the inner error.", CODE_DELETE, exc) from exc

        if result.deleted_count == 0:
            logger.warning("Delete() matched no document with id {id}", id=object_id)
        logger.info("Deleted {count} document(s)", count=result.deleted_count)

    # ------------------------------------------------------------------ indexes
    def create_indices(self, doc: MongoDocument, *field_names: str) -> List[str]:
        """Create a unique ascending index per field, stopping at the first failure."""

        collection = self._collection(doc)
        created: List[str] = []
        for position, field_name in enumerate(field_names):
            try:
                with self._timeout():
                    created.append(collection.create_index([(field_name, ASCENDING)], unique=True))
            except PyMongoError as exc:
                raise StoreIndexError(
                    f"CreateIndices() failed on index {position} ({field_name!r}); "
                    f"{len(created)} index(es) already created. Check the inner error.",
                    CODE_INDEX,
                    exc,
                ) from exc
        logger.debug("Created indexes {names} on {collection}", names=created, collection=collection.full_name)
        return created

    # ------------------------------------------------------------------ fields
    def get_field_value(self, doc: MongoDocument, field_name: str) -> Any:
        return get_field_value(doc, field_name)
