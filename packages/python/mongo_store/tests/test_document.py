import pytest
from bson import ObjectId

from mongo_fakes import Archived, Person
from mongo_store import (
    NIL_OBJECT_ID,
    DataStoreError,
    MongoDocument,
    StorableDocument,
    StoreValidationError,
    StoreWriteError,
    UnknownFieldError,
    get_field_value,
    is_unset_id,
    parse_object_id,
)


def test_mongo_document_satisfies_contract():
    person = Person(first_name="John", last_name="Doe")

    assert isinstance(person, StorableDocument)
    assert person.get_collection_name() == ""
    assert person.get_database_name() == ""
    assert person.get_uri() == ""
    assert person.get_id() is None


def test_class_level_name_overrides():
    doc = Archived(title="x")

    assert doc.get_collection_name() == "archive"
    assert doc.get_database_name() == "otherdb"


def test_set_id_and_unset_sentinels():
    person = Person(first_name="John", last_name="Doe")
    oid = ObjectId()

    person.set_id(oid)

    assert person.get_id() == oid
    assert is_unset_id(None)
    assert is_unset_id(NIL_OBJECT_ID)
    assert not is_unset_id(oid)


def test_to_document_uses_tags_and_omits_unset_id():
    person = Person(first_name="John", last_name="Doe")

    assert person.to_document() == {"firstName": "John", "lastName": "Doe", "email": ""}

    person.set_id(ObjectId())
    assert person.to_document()["_id"] == person.id


def test_from_document_accepts_stored_layout():
    oid = ObjectId()

    person = Person.from_document({"_id": oid, "firstName": "Jane", "lastName": "Roe", "extra": 1})

    assert person.id == oid
    assert person.first_name == "Jane"


def test_hex_string_id_is_coerced():
    oid = ObjectId()

    assert Person(_id=str(oid), first_name="a", last_name="b").id == oid


def test_field_registry_maps_tags_to_attributes():
    assert Person.__field_registry__ == {
        "_id": "id",
        "firstName": "first_name",
        "lastName": "last_name",
        "email": "email",
    }
    assert MongoDocument.__field_registry__ == {"_id": "id"}


def test_get_field_value_by_tag():
    person = Person(first_name="John", last_name="Doe")

    assert get_field_value(person, "firstName") == "John"
    assert get_field_value(person, "_id") is None


def test_get_field_value_rejects_attribute_names_and_unknown_tags():
    person = Person(first_name="John", last_name="Doe")

    with pytest.raises(UnknownFieldError) as excinfo:
        get_field_value(person, "first_name")
    assert excinfo.value.code == 1009
    assert excinfo.value.field_name == "first_name"

    with pytest.raises(UnknownFieldError):
        get_field_value(person, "missing")


def test_parse_object_id():
    oid = ObjectId()

    assert parse_object_id(str(oid), 1003) == oid
    assert parse_object_id(oid, 1003) is oid
    with pytest.raises(StoreValidationError) as excinfo:
        parse_object_id("not-an-id", 1003)
    assert excinfo.value.code == 1003
    with pytest.raises(StoreValidationError):
        parse_object_id(None, 1003)


def test_error_carries_message_code_and_cause():
    cause = ValueError("inner")

    error = StoreWriteError("write failed", 1002, cause)

    assert isinstance(error, DataStoreError)
    assert error.message == "write failed"
    assert error.code == 1002
    assert error.unwrap() is cause
    assert error.__cause__ is cause
    assert str(error) == "StoreWriteError: Code: 1002, Message: write failed, InnerError: inner"
