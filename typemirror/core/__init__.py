"""
Core code generation components.

Provides the type model, schema graph, mapping table, flattening
transform and the base generator used by every language emitter.
"""

from .collisions import CollisionResolver, CollisionStrategy, FlatField
from .config import (
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    get_config_manager,
    load_config,
    load_target_configs,
)
from .errors import (
    CyclicStructure,
    GeneratorError,
    NameCollision,
    UnmappedPrimitive,
    UnresolvedReference,
    UnsupportedType,
)
from .flatten import FlattenPolicy, FlattenTransform, flatten_graph
from .generator import CodeGenerator, Declaration, GenerationResult, generate_code, prepare_graph
from .loader import SchemaDocumentError, load_schema_document, load_schema_file
from .mapping import MappingTable, OverrideMode, ScalarMapping, ScalarOverride
from .naming import NameSanitizer, NamingCase
from .schema import (
    AliasDef,
    FieldDef,
    FieldRename,
    FunctionAliasDef,
    SchemaGraph,
    StructDef,
    TypeDef,
    UnionDef,
    UnionVariant,
)
from .templates import TemplateEngine, TemplateError, create_template_engine
from .types import (
    ArrayRef,
    FunctionRef,
    MapRef,
    NamedRef,
    OptionalRef,
    PrimitiveKind,
    PrimitiveRef,
    TypeRef,
)

__all__ = [
    # Type model
    "PrimitiveKind",
    "PrimitiveRef",
    "NamedRef",
    "ArrayRef",
    "MapRef",
    "OptionalRef",
    "FunctionRef",
    "TypeRef",
    # Schema graph
    "FieldDef",
    "AliasDef",
    "StructDef",
    "UnionDef",
    "UnionVariant",
    "FunctionAliasDef",
    "FieldRename",
    "TypeDef",
    "SchemaGraph",
    "SchemaDocumentError",
    "load_schema_document",
    "load_schema_file",
    # Mapping table
    "MappingTable",
    "OverrideMode",
    "ScalarOverride",
    "ScalarMapping",
    # Flattening
    "FlattenPolicy",
    "FlattenTransform",
    "flatten_graph",
    "CollisionResolver",
    "CollisionStrategy",
    "FlatField",
    # Errors
    "GeneratorError",
    "UnresolvedReference",
    "CyclicStructure",
    "NameCollision",
    "UnmappedPrimitive",
    "UnsupportedType",
    # Base generator interface
    "CodeGenerator",
    "Declaration",
    "GenerationResult",
    "generate_code",
    "prepare_graph",
    # Naming utilities
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "get_config_manager",
    "load_config",
    "load_target_configs",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
