"""
TypeScript code generator implementation.

Emits ``type`` declarations for every root definition of a schema graph,
in declaration order, preceded by any generated scalar aliases.
"""

from typing import Dict, List, Optional

from ...core.config import GeneratorConfig
from ...core.errors import NameCollision, UnsupportedType
from ...core.generator import CodeGenerator, Declaration
from ...core.mapping import MappingTable
from ...core.schema import AliasDef, FunctionAliasDef, SchemaGraph, StructDef, TypeDef, UnionDef
from ...core.templates import TemplateEngine
from ...core.types import PrimitiveKind
from ...logging_config import get_logger
from .config import FILE_HEADER, TypeScriptConfig
from .naming import create_typescript_sanitizer
from .types import STRUCT_BODY_SOURCE, STRUCT_BODY_TEMPLATE, EmitContext, TypeScriptTypeMapper

logger = get_logger(__name__)

DECLARATION_TEMPLATE = "declaration.ts.j2"

DECLARATION_SOURCE = """{% if description %}{{ description | doc_comment }}
{% endif %}{{ "export " if export else "" }}type {{ name }} = {{ body }}{{ ";" if semicolon else "" }}"""


class TypeScriptGenerator(CodeGenerator):
    """Code generator for TypeScript type declarations."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize TypeScript generator with configuration."""
        super().__init__(config)

        self.ts_config = TypeScriptConfig(self.config)
        self.sanitizer = create_typescript_sanitizer()

    def register_templates(self, engine: TemplateEngine):
        engine.add_template(DECLARATION_TEMPLATE, DECLARATION_SOURCE)
        engine.add_template(STRUCT_BODY_TEMPLATE, STRUCT_BODY_SOURCE)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "typescript"

    @property
    def file_extension(self) -> str:
        """Return TypeScript file extension."""
        return ".ts"

    @property
    def header(self) -> str:
        return FILE_HEADER

    def default_primitives(self) -> Dict[PrimitiveKind, str]:
        return self.ts_config.primitives()

    def emit(self, graph: SchemaGraph, mapping: Optional[MappingTable] = None) -> List[Declaration]:
        """
        Render every root definition of ``graph``.

        Generated scalar aliases are collected while rendering and placed
        before the graph's own declarations, each exactly once.

        Raises:
            UnmappedPrimitive: If a primitive kind has no mapping
            UnsupportedType: If a map key is not scalar or a declared name
                is not a valid TypeScript type name
            CyclicStructure: If an inline object contains itself
            NameCollision: If two declarations share a name with different bodies
        """
        mapping = mapping or self.mapping_table()
        mapper = TypeScriptTypeMapper(graph, mapping, self.ts_config, self.template_engine, self.sanitizer)
        ctx = EmitContext()

        declarations: List[Declaration] = []
        emitted: Dict[str, str] = {}

        for definition in graph.root_definitions():
            declaration = self._render_definition(definition, mapper, ctx)
            if self._register(emitted, declaration):
                declarations.append(declaration)

        generated: List[Declaration] = []
        for name, syntax in ctx.aliases.items():
            declaration = self._render_declaration(name, "alias", syntax)
            if name in graph and not graph.is_root(name):
                raise NameCollision("<schema>", name, ["generated alias", f"definition {name}"])
            if self._register(emitted, declaration):
                generated.append(declaration)

        if generated:
            logger.debug("Generated scalar aliases: %s", ", ".join(d.name for d in generated))

        return generated + declarations

    def _register(self, emitted: Dict[str, str], declaration: Declaration) -> bool:
        """Record a declaration; False when an identical one was already emitted."""
        existing = emitted.get(declaration.name)
        if existing is None:
            emitted[declaration.name] = declaration.text
            return True
        if existing == declaration.text:
            return False
        raise NameCollision("<output>", declaration.name, [existing, declaration.text])

    def _render_definition(self, definition: TypeDef, mapper: TypeScriptTypeMapper, ctx: EmitContext) -> Declaration:
        if isinstance(definition, AliasDef):
            kind = "alias"
            body = mapper.render(definition.target, ctx, definition.name)
        elif isinstance(definition, StructDef):
            kind = "struct"
            body = mapper.render_struct(definition, ctx)
        elif isinstance(definition, UnionDef):
            kind = "union"
            body = mapper.render_union(definition, ctx)
        elif isinstance(definition, FunctionAliasDef):
            kind = "function"
            body = mapper.render_function(definition.signature, ctx, definition.name)
        else:
            raise TypeError(f"Unhandled type definition: {definition!r}")

        return self._render_declaration(definition.name, kind, body, definition.description)

    def _render_declaration(self, name: str, kind: str, body: str, description: Optional[str] = None) -> Declaration:
        if not self.sanitizer.is_valid_type_name(name):
            raise UnsupportedType(f"'{name}' is not a valid TypeScript type name")

        text = self.render_template(
            DECLARATION_TEMPLATE,
            {
                "name": name,
                "body": body,
                "export": self.ts_config.export_types,
                "semicolon": self.ts_config.include_semicolon,
                "description": description if self.ts_config.add_comments else None,
            },
        )
        if self.ts_config.line_ending != "\n":
            # Templates render with "\n", struct bodies included
            text = text.replace("\n", self.ts_config.line_ending)
        return Declaration(name=name, kind=kind, text=text)


def create_typescript_generator(config: Optional[GeneratorConfig] = None) -> TypeScriptGenerator:
    """Create a TypeScript generator, using the default profile when no config is given."""
    return TypeScriptGenerator(config)
