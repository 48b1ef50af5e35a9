"""
TypeScript type rendering.

Maps type references of a schema graph to TypeScript type expressions,
applying nullability, the scalar override slot and the array, map and
function syntax preferences.
"""

import json
from collections import OrderedDict
from typing import Dict, List, Optional

from ...core.errors import CyclicStructure, NameCollision, UnsupportedType
from ...core.mapping import MappingTable
from ...core.schema import FieldDef, SchemaGraph, StructDef, UnionDef
from ...core.templates import TemplateEngine
from ...core.types import (
    ArrayRef,
    FunctionRef,
    MapRef,
    NamedRef,
    OptionalRef,
    PrimitiveRef,
    TypeRef,
    describe,
    unwrap_optional,
)
from .config import TypeScriptConfig
from .naming import TypeScriptSanitizer

STRUCT_BODY_TEMPLATE = "struct_body.ts.j2"

STRUCT_BODY_SOURCE = """{
{%- for field in fields %}
{%- if field.comment %}
{{ field.comment | doc_comment(indent) }}
{%- endif %}
{{ indent }}{{ field.name }}{{ "?" if field.optional else "" }}: {{ field.type }};
{%- endfor %}
{{ closing_indent }}}"""


class EmitContext:
    """
    State of one emission run.

    Created fresh for every call to ``emit`` so that concurrent runs on
    one generator never share anything mutable.
    """

    def __init__(self):
        # generated alias identifier -> target syntax, in first-use order
        self.aliases: Dict[str, str] = OrderedDict()
        # structs currently being rendered inline, outermost first
        self.inline_stack: List[str] = []

    def require_alias(self, name: str, syntax: str):
        existing = self.aliases.get(name)
        if existing is None:
            self.aliases[name] = syntax
        elif existing != syntax:
            raise NameCollision("<generated aliases>", name, [existing, syntax])


class TypeScriptTypeMapper:
    """Renders type references of one graph as TypeScript type expressions."""

    def __init__(
        self,
        graph: SchemaGraph,
        mapping: MappingTable,
        config: TypeScriptConfig,
        engine: TemplateEngine,
        sanitizer: Optional[TypeScriptSanitizer] = None,
    ):
        self.graph = graph
        self.mapping = mapping
        self.config = config
        self.engine = engine
        self.sanitizer = sanitizer or TypeScriptSanitizer()

    def nullable(self, text: str, ref: TypeRef) -> str:
        """
        Append the nullable suffix to ``text``, the rendering of ``ref``.

        Nothing is added when ``ref`` is already nullable at its top level,
        either as an ``OptionalRef`` or through an alias resolving to one.
        """
        _, wrapped = self.graph.follow(ref)
        if wrapped:
            return text
        if isinstance(ref, FunctionRef):
            # `() => T | null` would bind the suffix to the return type
            text = f"({text})"
        return text + self.config.null_suffix

    def render(self, ref: TypeRef, ctx: EmitContext, owner: str, level: int = 1) -> str:
        """
        Render a type reference.

        Args:
            ref: Reference to render
            ctx: Per-run emission state
            owner: Definition being rendered, for error context
            level: Nesting level of the enclosing object type

        Returns:
            TypeScript type expression
        """
        if isinstance(ref, PrimitiveRef):
            return self.render_scalar(ref, ctx, owner)
        if isinstance(ref, NamedRef):
            return self._render_named(ref, ctx, owner, level)
        if isinstance(ref, OptionalRef):
            return self.nullable(self.render(ref.inner, ctx, owner, level), ref.inner)
        if isinstance(ref, ArrayRef):
            return self._render_array(ref, ctx, owner, level)
        if isinstance(ref, MapRef):
            return self._render_map(ref, ctx, owner, level)
        if isinstance(ref, FunctionRef):
            return self.render_function(ref, ctx, owner, level)
        raise TypeError(f"Unhandled type reference: {ref!r}")

    def render_scalar(self, ref: PrimitiveRef, ctx: EmitContext, owner: str) -> str:
        scalar = self.mapping.lookup(ref.kind, owner)
        if not scalar.is_alias:
            return scalar.syntax

        # Generated aliases follow the graph's naming scheme
        name = f"{self.graph.type_prefix}{scalar.alias_name}"
        ctx.require_alias(name, scalar.syntax)
        return name

    def _render_named(self, ref: NamedRef, ctx: EmitContext, owner: str, level: int) -> str:
        definition = self.graph.resolve(ref.identifier, owner)
        if self.config.inline_objects and isinstance(definition, StructDef):
            return self.render_struct(definition, ctx, level + 1)
        return ref.identifier

    def _render_array(self, ref: ArrayRef, ctx: EmitContext, owner: str, level: int) -> str:
        element = self.render(ref.element, ctx, owner, level)
        if self.config.prefer_array_generic:
            return f"Array<{element}>"

        if isinstance(ref.element, (OptionalRef, FunctionRef)):
            element = f"({element})"
        return f"{element}[]"

    def _render_map(self, ref: MapRef, ctx: EmitContext, owner: str, level: int) -> str:
        key_target, _ = self.graph.follow(ref.key)
        if not isinstance(key_target, PrimitiveRef) or isinstance(ref.key, OptionalRef):
            raise UnsupportedType(f"Non-scalar map key ({describe(ref.key)}) is not supported in {owner}")

        key = self.render(ref.key, ctx, owner, level)
        value = self.render(ref.value, ctx, owner, level)
        return f"Record<{key}, {value}>"

    def render_function(self, ref: FunctionRef, ctx: EmitContext, owner: str, level: int = 1) -> str:
        params = [
            f"arg{index}: {self.render(param, ctx, owner, level)}"
            for index, param in enumerate(ref.params)
        ]

        if ref.returns is None:
            returns = "void"
        else:
            returns = self.render(ref.returns, ctx, owner, level)
            # Returned function types need parentheses to bind correctly
            if isinstance(ref.returns, FunctionRef):
                returns = f"({returns})"

        return f"({', '.join(params)}) => {returns}"

    def render_field_type(self, item: FieldDef, ctx: EmitContext, owner: str, level: int) -> str:
        """Render a field's type with its nullability applied."""
        ref = item.type
        nullable = item.nullable

        # `name?: T | undefined` says nothing `name?: T` does not
        if item.optional and not self.config.prefer_null_for_nullable:
            ref, _ = unwrap_optional(ref)
            nullable = False

        if item.type_override is not None:
            text = item.type_override
        else:
            text = self.render(ref, ctx, f"{owner}.{item.name}", level)

        if nullable:
            text = self.nullable(text, ref)
        return text

    def render_struct(self, struct: StructDef, ctx: EmitContext, level: int = 1) -> str:
        """
        Render a struct as an object type literal.

        Args:
            struct: Struct to render
            ctx: Per-run emission state
            level: Nesting level; fields are indented ``level`` times

        Raises:
            CyclicStructure: If an inline struct contains itself
        """
        if struct.name in ctx.inline_stack:
            start = ctx.inline_stack.index(struct.name)
            raise CyclicStructure(ctx.inline_stack[start:] + [struct.name])

        if not struct.fields:
            return "{}"

        ctx.inline_stack.append(struct.name)
        try:
            fields = [
                {
                    "name": self.sanitizer.property_name(item.name),
                    "optional": item.optional,
                    "type": self.render_field_type(item, ctx, struct.name, level),
                    "comment": item.description if self.config.add_comments else None,
                }
                for item in struct.fields
            ]
        finally:
            ctx.inline_stack.pop()

        return self.engine.render_template(
            STRUCT_BODY_TEMPLATE,
            {
                "fields": fields,
                "indent": self.config.indent * level,
                "closing_indent": self.config.indent * (level - 1),
            },
        )

    def render_union(self, union: UnionDef, ctx: EmitContext) -> str:
        """
        Render a union.

        Label-only variants become string literals; variants with a
        payload become ``{ type: "label"; value: T }`` objects.
        """
        if not union.variants:
            return "never"

        parts = []
        for variant in union.variants:
            label = json.dumps(variant.label)
            if variant.payload is None:
                parts.append(label)
                continue

            payload = self.render(variant.payload, ctx, f"{union.name}.{variant.label}")
            tag_field = self.sanitizer.property_name(self.config.union_tag_field)
            value_field = self.sanitizer.property_name(self.config.union_value_field)
            parts.append(f"{{ {tag_field}: {label}; {value_field}: {payload} }}")

        return " | ".join(parts)
