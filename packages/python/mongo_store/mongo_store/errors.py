"""Uniform errors raised by the document store.

Every failure that crosses the ``MongoStore`` boundary is a ``DataStoreError``.
The numeric ``code`` groups failures by operation (1000s for connection and
configuration, one sub-code per operation). Treat it as a diagnostic hint, not
as something to match on.
"""

from __future__ import annotations

from typing import Optional

CODE_CONFIGURATION = 1000
CODE_CONNECT = 1001
CODE_CREATE = 1002
CODE_GET_BY_ID = 1003
CODE_GET_ALL = 1004
CODE_UPDATE = 1004
CODE_DELETE = 1005
CODE_QUERY = 1006
CODE_UPSERT = 1007
CODE_INDEX = 1008
CODE_FIELD = 1009


class DataStoreError(Exception):
    """Base error carrying a message, a coarse code and the wrapped cause."""

    def __init__(self, message: str, code: int, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return (
            f"{type(self).__name__}: Code: {self.code}, "
            f"Message: {self.message}, InnerError: {self.cause}"
        )

    def unwrap(self) -> Optional[BaseException]:
        return self.cause


class StoreConnectionError(DataStoreError):
    """The client could not be created or the server did not answer in time."""


class StoreConfigurationError(DataStoreError):
    """Collection or database name could not be resolved."""


class StoreValidationError(DataStoreError):
    """Caller input was malformed (bad identity, bad query arguments)."""


class StoreLookupError(DataStoreError):
    """A read failed for a reason other than "no such document"."""


class DocumentNotFoundError(DataStoreError):
    """No document matched the requested identity."""


class StoreWriteError(DataStoreError):
    """Insert, update, replace or delete failed."""


class StoreDecodeError(DataStoreError):
    """A stored record could not be turned into the target document type."""


class StoreIndexError(DataStoreError):
    """Index creation failed."""


class UnknownFieldError(DataStoreError):
    """No field of the document carries the requested serialization tag."""

    def __init__(self, field_name: str, document_type: type, cause: Optional[BaseException] = None):
        super().__init__(
            f"{document_type.__name__} has no field tagged '{field_name}'",
            CODE_FIELD,
            cause,
        )
        self.field_name = field_name
        self.document_type = document_type
