"""Shared fixtures: the Person/Address sample model."""

import json

import pytest

from typemirror.core.config import load_config
from typemirror.core.schema import AliasDef, FieldDef, FunctionAliasDef, SchemaGraph, StructDef
from typemirror.core.types import (
    BOOLEAN,
    INTEGER,
    STRING,
    TIMESTAMP,
    ArrayRef,
    FunctionRef,
    MapRef,
    NamedRef,
)
from typemirror.languages.typescript import TypeScriptGenerator


def build_person_definitions():
    language = AliasDef("Language", STRING)
    address = StructDef(
        "Address",
        (
            FieldDef("line_1", STRING, nullable=True),
            FieldDef("line_2", STRING, nullable=True),
            FieldDef("street", STRING),
            FieldDef("city", STRING),
            FieldDef("state", STRING),
            FieldDef("postal_code", STRING),
            FieldDef("country", STRING),
        ),
    )
    tags = AliasDef("Tags", MapRef(STRING, STRING))
    person = StructDef(
        "Person",
        (
            FieldDef("first_name", STRING),
            FieldDef("last_name", STRING),
            FieldDef("age", INTEGER),
            FieldDef("address", NamedRef("Address")),
            FieldDef("languages", ArrayRef(STRING)),
            FieldDef("grades", MapRef(STRING, INTEGER), optional=True),
            FieldDef("tags", MapRef(STRING, STRING)),
            FieldDef("created_at", TIMESTAMP),
            FieldDef("updated_at", TIMESTAMP, nullable=True, type_override="number"),
            FieldDef("deleted_at", TIMESTAMP, nullable=True),
            FieldDef("is_active", BOOLEAN),
        ),
    )
    collection = StructDef(
        "Collection",
        (
            FieldDef("items", ArrayRef(STRING)),
            FieldDef("desc", STRING),
        ),
    )
    create_user = FunctionAliasDef("CreateUserFunc", FunctionRef((NamedRef("Person"),), STRING))
    return [language, address, tags, person, collection, create_user]


PERSON_DOCUMENT = {
    "definitions": [
        {"kind": "alias", "name": "Language", "type": "string"},
        {
            "kind": "struct",
            "name": "Address",
            "fields": [
                {"name": "line_1", "type": "string", "nullable": True},
                {"name": "line_2", "type": "string", "nullable": True},
                {"name": "street", "type": "string"},
                {"name": "city", "type": "string"},
                {"name": "state", "type": "string"},
                {"name": "postal_code", "type": "string"},
                {"name": "country", "type": "string"},
            ],
        },
        {"kind": "alias", "name": "Tags", "type": {"map": ["string", "string"]}},
        {
            "kind": "struct",
            "name": "Person",
            "fields": [
                {"name": "first_name", "type": "string"},
                {"name": "last_name", "type": "string"},
                {"name": "age", "type": "integer"},
                {"name": "address", "type": {"named": "Address"}},
                {"name": "languages", "type": {"array": "string"}},
                {"name": "grades", "type": {"map": ["string", "integer"]}, "optional": True},
                {"name": "tags", "type": {"map": ["string", "string"]}},
                {"name": "created_at", "type": "timestamp"},
                {"name": "updated_at", "type": "timestamp", "nullable": True, "type_override": "number"},
                {"name": "deleted_at", "type": "timestamp", "nullable": True},
                {"name": "is_active", "type": "boolean"},
            ],
        },
        {
            "kind": "struct",
            "name": "Collection",
            "fields": [
                {"name": "items", "type": {"array": "string"}},
                {"name": "desc", "type": "string"},
            ],
        },
        {
            "kind": "function",
            "name": "CreateUserFunc",
            "params": [{"named": "Person"}],
            "returns": "string",
        },
    ]
}


@pytest.fixture
def person_graph():
    return SchemaGraph(build_person_definitions())


@pytest.fixture
def person_document():
    return json.loads(json.dumps(PERSON_DOCUMENT))


@pytest.fixture
def schema_file(tmp_path, person_document):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(person_document), encoding="utf-8")
    return path


@pytest.fixture
def make_generator():
    """Build a TypeScript generator from a profile plus overrides."""

    def _make(profile="default", **overrides):
        return TypeScriptGenerator(load_config(profile, custom_config=overrides or None))

    return _make
