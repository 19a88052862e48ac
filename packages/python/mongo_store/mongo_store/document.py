"""Document contract and the pydantic base that implements it.

Any object with the five ``StorableDocument`` methods can describe where it is
stored. ``MongoDocument`` adds the BSON mapping the store needs::

    class Person(MongoDocument):
        __collection_name__ = "people"

        first_name: str = Field(alias="firstName")
        last_name: str = Field(alias="lastName")

Each subclass gets a field registry when it is created, mapping the
serialization tag (``"firstName"``) to the attribute (``first_name``).
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Dict, Mapping, Optional, Protocol, runtime_checkable

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from .errors import StoreValidationError, UnknownFieldError

NIL_OBJECT_ID = ObjectId(b"\x00" * 12)


@runtime_checkable
class StorableDocument(Protocol):
    """Minimal method set a type needs to be stored and retrieved generically.

    Empty strings from the three name methods defer to the store's defaults.
    """

    def get_collection_name(self) -> str: ...

    def get_database_name(self) -> str: ...

    def get_uri(self) -> str: ...

    def get_id(self) -> Optional[ObjectId]: ...

    def set_id(self, value: ObjectId) -> None: ...


def is_unset_id(value: Optional[ObjectId]) -> bool:
    return value is None or value == NIL_OBJECT_ID


def parse_object_id(value: Any, code: int) -> ObjectId:
    """Parse a 24-character hex string (or pass an ObjectId through)."""

    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise StoreValidationError(f"Expected an ObjectId hex string, got {type(value).__name__}.", code)
    try:
        return ObjectId(value)
    except InvalidId as exc:
        raise StoreValidationError(
            f"'{value}' is not a valid ObjectId. Check the inner error.",
            code,
            exc,
        ) from exc


def _coerce_object_id(value: Any) -> Any:
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return value


DocumentId = Annotated[ObjectId, BeforeValidator(_coerce_object_id)]


def _build_registry(model: type[BaseModel]) -> Dict[str, str]:
    registry: Dict[str, str] = {}
    for name, info in model.model_fields.items():
        tag = info.serialization_alias or info.alias or name
        registry[tag] = name
    return registry


class MongoDocument(BaseModel):
    """Pydantic base for stored documents; ``id`` is persisted as ``_id``."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    __collection_name__: ClassVar[str] = ""
    __database_name__: ClassVar[str] = ""
    __uri__: ClassVar[str] = ""
    __field_registry__: ClassVar[Dict[str, str]] = {}

    id: Optional[DocumentId] = Field(default=None, alias="_id")

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        cls.__field_registry__ = _build_registry(cls)

    # contract
    def get_collection_name(self) -> str:
        return type(self).__collection_name__

    def get_database_name(self) -> str:
        return type(self).__database_name__

    def get_uri(self) -> str:
        return type(self).__uri__

    def get_id(self) -> Optional[ObjectId]:
        return self.id

    def set_id(self, value: ObjectId) -> None:
        self.id = value

    # BSON mapping
    def to_document(self) -> Dict[str, Any]:
        """Return the BSON-ready mapping keyed by serialization tag."""

        data = self.model_dump(by_alias=True)
        if is_unset_id(self.id):
            data.pop("_id", None)
        return data

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> "MongoDocument":
        return cls.model_validate(dict(raw))

    def assign_from(self, other: "MongoDocument") -> None:
        """Copy every field of ``other`` onto this instance."""

        for name in type(self).model_fields:
            setattr(self, name, getattr(other, name))

    @classmethod
    def field_for_tag(cls, tag: str) -> str:
        try:
            return cls.__field_registry__[tag]
        except KeyError:
            raise UnknownFieldError(tag, cls) from None


MongoDocument.__field_registry__ = _build_registry(MongoDocument)


def get_field_value(doc: MongoDocument, field_name: str) -> Any:
    """Return the value of the field whose serialization tag is ``field_name``."""

    attribute = type(doc).field_for_tag(field_name)
    return getattr(doc, attribute)
