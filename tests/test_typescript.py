"""
Tests for the TypeScript generator.

Tests cover:
- Full output for the default and flattened profiles
- Inline and alias rendering of timestamps
- Optional versus nullable rendering
- Array, map, function and union syntax
- Inline object types and doc comments
- Failure modes surfaced by emission
"""

import pytest

from typemirror.core.errors import CyclicStructure, NameCollision, UnmappedPrimitive, UnsupportedType
from typemirror.core.generator import generate_code, prepare_graph
from typemirror.core.mapping import MappingTable
from typemirror.core.schema import AliasDef, FieldDef, FunctionAliasDef, SchemaGraph, StructDef, UnionDef, UnionVariant
from typemirror.core.types import (
    ANY,
    BOOLEAN,
    INTEGER,
    STRING,
    TIMESTAMP,
    ArrayRef,
    FunctionRef,
    MapRef,
    NamedRef,
    OptionalRef,
    PrimitiveKind,
)
from typemirror.languages.typescript import FILE_HEADER, TypeScriptGenerator, create_flattened_generator

DEFAULT_OUTPUT = """type Language = string;

type Address = {
\tline_1: string | null;
\tline_2: string | null;
\tstreet: string;
\tcity: string;
\tstate: string;
\tpostal_code: string;
\tcountry: string;
};

type Tags = Record<string, string>;

type Person = {
\tfirst_name: string;
\tlast_name: string;
\tage: number;
\taddress: Address;
\tlanguages: Array<string>;
\tgrades?: Record<string, number>;
\ttags: Record<string, string>;
\tcreated_at: string;
\tupdated_at: number | null;
\tdeleted_at: string | null;
\tis_active: boolean;
};

type Collection = {
\titems: Array<string>;
\tdesc: string;
};

type CreateUserFunc = (arg0: Person) => string;"""

FLATTENED_OUTPUT = """export type Flattened_Language = string;

export type Flattened_Tags = Record<string, string>;

export type Flattened_Person = {
    first_name: string;
    last_name: string;
    age: number;
    line_1: string | null;
    line_2: string | null;
    street: string;
    city: string;
    state: string;
    postal_code: string;
    country: string;
    languages: Array<string>;
    grades?: Record<string, number>;
    tags: Record<string, string>;
    created_at: string;
    updated_at: number | null;
    deleted_at: string | null;
    is_active: boolean;
};

export type Flattened_Collection = {
    items: Array<string>;
    desc: string;
};

export type Flattened_CreateUserFunc = (arg0: Person) => string;"""


def emit_text(generator, graph):
    return generator.generate(prepare_graph(graph, generator.config))


def single_struct(*fields, name="Item"):
    return SchemaGraph([StructDef(name, tuple(fields))])


class TestSampleOutput:
    """Full output for the Person/Address sample."""

    def test_default_profile(self, person_graph, make_generator):
        assert emit_text(make_generator(), person_graph) == DEFAULT_OUTPUT

    def test_flattened_profile(self, person_graph):
        assert emit_text(create_flattened_generator(), person_graph) == FLATTENED_OUTPUT

    def test_generate_code_result(self, person_graph, make_generator):
        result = generate_code(make_generator("flattened"), person_graph)

        assert result.success
        assert result.code == FLATTENED_OUTPUT
        assert [d.name for d in result.declarations][:2] == ["Flattened_Language", "Flattened_Tags"]
        assert result.metadata["language"] == "typescript"
        assert result.metadata["flattened"] is True
        assert result.metadata["declaration_count"] == 5

    def test_emission_is_idempotent(self, person_graph, make_generator):
        generator = make_generator("flattened")
        assert emit_text(generator, person_graph) == emit_text(generator, person_graph)

    def test_declaration_order_follows_roots(self, person_graph, make_generator):
        declarations = make_generator().emit(person_graph)
        assert [d.name for d in declarations] == list(person_graph.roots)
        assert [d.kind for d in declarations] == ["alias", "struct", "alias", "struct", "struct", "function"]

    def test_header(self, make_generator):
        header = make_generator().header
        assert header == FILE_HEADER
        assert header.startswith("/**\n* This file was generated by mirror")


class TestTimestampOverride:
    """Inline versus alias rendering of timestamps."""

    def test_inline_mode(self, person_graph):
        text = emit_text(create_flattened_generator(), person_graph)
        assert "created_at: string;" in text
        assert "Timestamp" not in text

    def test_alias_mode(self, person_graph):
        text = emit_text(create_flattened_generator(timestamp_alias=True), person_graph)

        assert text.startswith("export type Flattened_Timestamp = string;\n\n")
        assert text.count("type Flattened_Timestamp =") == 1
        assert "created_at: Flattened_Timestamp;" in text
        assert "deleted_at: Flattened_Timestamp | null;" in text
        assert "updated_at: number | null;" in text

    def test_alias_without_prefix(self, person_graph, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": "alias"})
        declarations = generator.emit(person_graph)

        assert declarations[0].name == "Timestamp"
        assert declarations[0].text == "type Timestamp = string;"
        assert sum(1 for d in declarations if d.name == "Timestamp") == 1

    def test_alias_not_emitted_when_unused(self, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": "alias"})
        declarations = generator.emit(single_struct(FieldDef("id", STRING)))
        assert [d.name for d in declarations] == ["Item"]

    def test_alias_matching_existing_definition(self, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": "alias"})
        graph = SchemaGraph(
            [
                AliasDef("Timestamp", STRING),
                StructDef("Event", (FieldDef("at", TIMESTAMP),)),
            ]
        )
        names = [d.name for d in generator.emit(graph)]
        assert names == ["Timestamp", "Event"]

    def test_alias_conflicting_with_definition(self, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": "alias"})
        graph = SchemaGraph(
            [
                AliasDef("Timestamp", INTEGER),
                StructDef("Event", (FieldDef("at", TIMESTAMP),)),
            ]
        )
        with pytest.raises(NameCollision, match="Timestamp"):
            generator.emit(graph)

    def test_inline_override_target(self, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": {"mode": "inline", "target": "Date"}})
        text = emit_text(generator, single_struct(FieldDef("at", TIMESTAMP)))
        assert "\tat: Date;" in text

    def test_unmapped_primitive(self, make_generator):
        generator = make_generator()
        mapping = generator.mapping_table().without(PrimitiveKind.TIMESTAMP)
        with pytest.raises(UnmappedPrimitive):
            generator.emit(single_struct(FieldDef("at", TIMESTAMP)), mapping)


class TestNullability:
    """Optional and nullable fields."""

    def test_optional_without_null_union(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("grades", MapRef(STRING, INTEGER), optional=True)))
        assert "\tgrades?: Record<string, number>;" in text

    def test_nullable_without_optional_marker(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("deleted_at", TIMESTAMP, nullable=True)))
        assert "\tdeleted_at: string | null;" in text

    def test_optional_and_nullable(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("nickname", STRING, optional=True, nullable=True)))
        assert "\tnickname?: string | null;" in text

    def test_undefined_preference(self, make_generator):
        generator = make_generator(prefer_null_for_nullable=False)
        text = emit_text(
            generator,
            single_struct(
                FieldDef("a", STRING, nullable=True),
                FieldDef("b", STRING, optional=True, nullable=True),
            ),
        )
        assert "\ta: string | undefined;" in text
        assert "\tb?: string;" in text

    def test_optional_ref_not_doubled(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("a", OptionalRef(STRING), nullable=True)))
        assert "\ta: string | null;" in text

    def test_nullable_function_is_parenthesised(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("cb", FunctionRef(), nullable=True)))
        assert "\tcb: (() => void) | null;" in text

    def test_nullable_function_with_nullable_return(self, make_generator):
        callback = FunctionRef((INTEGER,), OptionalRef(STRING))
        text = emit_text(
            make_generator(),
            single_struct(
                FieldDef("cb", callback, nullable=True),
                FieldDef("cb2", OptionalRef(callback)),
            ),
        )
        assert "\tcb: ((arg0: number) => string | null) | null;" in text
        assert "\tcb2: ((arg0: number) => string | null) | null;" in text

    def test_function_with_nullable_return_stays_required(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("cb", FunctionRef((), OptionalRef(STRING)))))
        assert "\tcb: () => string | null;" in text

    def test_nullable_alias_not_doubled(self, make_generator):
        graph = SchemaGraph(
            [
                AliasDef("MaybeName", OptionalRef(STRING)),
                StructDef("Item", (FieldDef("name", NamedRef("MaybeName"), nullable=True),)),
            ]
        )
        assert "\tname: MaybeName;" in emit_text(make_generator(), graph)

    def test_optional_function_with_undefined_preference(self, make_generator):
        callback = FunctionRef((), OptionalRef(STRING))
        generator = make_generator(prefer_null_for_nullable=False)
        text = emit_text(generator, single_struct(FieldDef("cb", callback, optional=True, nullable=True)))
        assert "\tcb?: () => string | undefined;" in text


class TestSyntax:
    """Array, map, function and union rendering."""

    def test_array_styles(self, make_generator):
        graph = single_struct(
            FieldDef("names", ArrayRef(STRING)),
            FieldDef("maybe", ArrayRef(OptionalRef(STRING))),
        )
        generic = emit_text(make_generator(), graph)
        assert "\tnames: Array<string>;" in generic
        assert "\tmaybe: Array<string | null>;" in generic

        brackets = emit_text(make_generator(prefer_array_generic=False), graph)
        assert "\tnames: string[];" in brackets
        assert "\tmaybe: (string | null)[];" in brackets

    def test_map_with_alias_key(self, make_generator):
        graph = SchemaGraph(
            [
                AliasDef("Code", STRING),
                AliasDef("Scores", MapRef(NamedRef("Code"), ArrayRef(INTEGER))),
            ]
        )
        text = emit_text(make_generator(), graph)
        assert "type Scores = Record<Code, Array<number>>;" in text

    def test_map_with_struct_key(self, make_generator):
        graph = SchemaGraph(
            [
                StructDef("Key", (FieldDef("id", STRING),)),
                AliasDef("Lookup", MapRef(NamedRef("Key"), STRING)),
            ]
        )
        with pytest.raises(UnsupportedType, match="map key"):
            make_generator().emit(graph)

    def test_function_rendering(self, make_generator):
        graph = SchemaGraph(
            [
                FunctionAliasDef("Notify", FunctionRef((STRING, INTEGER))),
                FunctionAliasDef("Factory", FunctionRef((), FunctionRef((BOOLEAN,), STRING))),
            ]
        )
        text = emit_text(make_generator(), graph)
        assert "type Notify = (arg0: string, arg1: number) => void;" in text
        assert "type Factory = () => ((arg0: boolean) => string);" in text

    def test_union_rendering(self, make_generator):
        graph = SchemaGraph(
            [
                UnionDef(
                    "Role",
                    (UnionVariant("admin"), UnionVariant("user", STRING)),
                )
            ]
        )
        text = emit_text(make_generator(), graph)
        assert text == 'type Role = "admin" | { type: "user"; value: string };'

    def test_union_field_names(self, make_generator):
        graph = SchemaGraph([UnionDef("Shape", (UnionVariant("circle", INTEGER),))])
        text = emit_text(make_generator(union_tag_field="kind", union_value_field="data"), graph)
        assert text == 'type Shape = { kind: "circle"; data: number };'

    def test_empty_union(self, make_generator):
        assert emit_text(make_generator(), SchemaGraph([UnionDef("Nothing", ())])) == "type Nothing = never;"

    def test_prefer_unknown(self, make_generator):
        graph = SchemaGraph([AliasDef("Blob", ANY)])
        assert emit_text(make_generator(), graph) == "type Blob = any;"
        assert emit_text(make_generator(prefer_unknown=True), graph) == "type Blob = unknown;"

    def test_semicolon_and_export(self, make_generator):
        graph = SchemaGraph([AliasDef("Id", STRING)])
        text = emit_text(make_generator(include_semicolon=False, export_types=True), graph)
        assert text == "export type Id = string"

    def test_quoted_property_names(self, make_generator):
        text = emit_text(make_generator(), single_struct(FieldDef("first-name", STRING)))
        assert '\t"first-name": string;' in text

    def test_type_override_keeps_nullability(self, make_generator):
        field = FieldDef("updated_at", TIMESTAMP, nullable=True, type_override="number")
        assert "\tupdated_at: number | null;" in emit_text(make_generator(), single_struct(field))

    def test_empty_struct(self, make_generator):
        assert emit_text(make_generator(), single_struct()) == "type Item = {};"

    def test_empty_struct_inline(self, make_generator):
        graph = SchemaGraph(
            [
                StructDef("Marker", ()),
                StructDef("Item", (FieldDef("marker", NamedRef("Marker")),)),
            ],
            roots=["Item"],
        )
        assert emit_text(make_generator(inline_objects=True), graph) == "type Item = {\n\tmarker: {};\n};"

    def test_line_ending(self, make_generator):
        graph = SchemaGraph(
            [
                StructDef("A", (FieldDef("x", STRING, description="X coordinate"),)),
                StructDef("B", (FieldDef("y", STRING),)),
            ]
        )
        text = emit_text(make_generator(line_ending="\r\n"), graph)
        assert text == (
            "type A = {\r\n\t/** X coordinate */\r\n\tx: string;\r\n};"
            "\r\n\r\n"
            "type B = {\r\n\ty: string;\r\n};"
        )

    @pytest.mark.parametrize("name", ["type", "string", "1Foo", "first-name"])
    def test_invalid_declaration_name(self, make_generator, name):
        with pytest.raises(UnsupportedType, match="not a valid TypeScript type name"):
            make_generator().emit(SchemaGraph([AliasDef(name, STRING)]))

    def test_invalid_generated_alias_name(self, make_generator):
        generator = make_generator(scalar_overrides={"timestamp": {"mode": "alias", "alias": "type"}})
        with pytest.raises(UnsupportedType, match="'type'"):
            generator.emit(single_struct(FieldDef("at", TIMESTAMP)))

    def test_invalid_derived_name(self, make_generator):
        generator = make_generator(type_prefix="1")
        with pytest.raises(UnsupportedType, match="'1Item'"):
            generator.emit(prepare_graph(single_struct(FieldDef("id", STRING)), generator.config))

    def test_space_indentation(self, make_generator):
        text = emit_text(make_generator(use_tabs=False, indent_size=2), single_struct(FieldDef("id", STRING)))
        assert text == "type Item = {\n  id: string;\n};"


class TestInlineObjects:
    """Nested object literals when inline_objects is enabled."""

    def test_nested_struct_is_inlined(self, person_graph, make_generator):
        text = emit_text(make_generator(inline_objects=True), person_graph)
        assert "\taddress: {\n\t\tline_1: string | null;\n" in text
        assert "\t\tcountry: string;\n\t};\n" in text

    def test_array_of_structs(self, make_generator):
        graph = SchemaGraph(
            [
                StructDef("Tag", (FieldDef("label", STRING),)),
                StructDef("Post", (FieldDef("tags", ArrayRef(NamedRef("Tag"))),)),
            ],
            roots=["Post"],
        )
        text = emit_text(make_generator(inline_objects=True), graph)
        assert text == "type Post = {\n\ttags: Array<{\n\t\tlabel: string;\n\t}>;\n};"

    def test_recursive_struct_rejected(self, make_generator):
        graph = SchemaGraph([StructDef("Node", (FieldDef("next", NamedRef("Node"), nullable=True),))])
        with pytest.raises(CyclicStructure):
            make_generator(inline_objects=True).emit(graph)

    def test_recursive_struct_by_name(self, make_generator):
        graph = SchemaGraph([StructDef("Node", (FieldDef("next", NamedRef("Node"), nullable=True),))])
        assert emit_text(make_generator(), graph) == "type Node = {\n\tnext: Node | null;\n};"


class TestComments:
    """Doc comments from descriptions."""

    def test_descriptions_rendered(self, make_generator):
        graph = SchemaGraph(
            [
                StructDef(
                    "User",
                    (FieldDef("id", STRING, description="Primary key"),),
                    description="A registered user",
                )
            ]
        )
        text = emit_text(make_generator(), graph)
        assert text == "/** A registered user */\ntype User = {\n\t/** Primary key */\n\tid: string;\n};"

    def test_multiline_description(self, make_generator):
        graph = SchemaGraph([AliasDef("Id", STRING, description="Opaque id.\n\nNever parse it.")])
        text = emit_text(make_generator(), graph)
        assert text == "/**\n * Opaque id.\n *\n * Never parse it.\n */\ntype Id = string;"

    def test_comments_disabled(self, make_generator):
        graph = SchemaGraph([AliasDef("Id", STRING, description="Opaque id")])
        assert emit_text(make_generator(add_comments=False), graph) == "type Id = string;"


class TestGenerateCode:
    """Error handling in generate_code()."""

    def test_failure_returns_error_result(self, make_generator):
        graph = SchemaGraph([StructDef("Node", (FieldDef("next", OptionalRef(NamedRef("Node"))),))])
        result = generate_code(make_generator("flattened"), graph)

        assert not result.success
        assert result.code == ""
        assert isinstance(result.exception, CyclicStructure)
        assert "Cyclic structure" in result.error_message

    def test_explicit_mapping(self, make_generator):
        generator = make_generator()
        mapping = MappingTable(generator.default_primitives()).with_primitive(PrimitiveKind.INTEGER, "bigint")
        result = generate_code(generator, single_struct(FieldDef("count", INTEGER)), mapping)
        assert "\tcount: bigint;" in result.code

    def test_generator_default_config(self):
        generator = TypeScriptGenerator()
        assert generator.config.use_tabs is True
        assert generator.file_extension == ".ts"
