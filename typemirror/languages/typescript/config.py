"""
TypeScript-specific configuration and type mappings.

Reads the language-specific settings out of ``GeneratorConfig.custom``
and holds the fixed primitive syntax table.
"""

from typing import Dict

from ...core.config import ConfigError, GeneratorConfig
from ...core.types import PrimitiveKind

FILE_HEADER = """/**
* This file was generated by mirror, do not edit it manually as it will be overwritten.
*
* You can find the docs and source code for mirror here: https://github.com/aosasona/mirror
*/
"""

# TypeScript primitive mappings
TYPESCRIPT_PRIMITIVES: Dict[PrimitiveKind, str] = {
    PrimitiveKind.INTEGER: "number",
    PrimitiveKind.FLOAT: "number",
    PrimitiveKind.STRING: "string",
    PrimitiveKind.BOOLEAN: "boolean",
    PrimitiveKind.BYTE: "string",
    PrimitiveKind.TIMESTAMP: "string",
    PrimitiveKind.ANY: "any",
}

TYPESCRIPT_RESERVED_WORDS = {
    "any", "boolean", "break", "case", "catch", "class", "const", "continue",
    "debugger", "default", "delete", "do", "else", "enum", "export", "extends",
    "false", "finally", "for", "function", "if", "import", "in", "instanceof",
    "never", "new", "null", "number", "object", "return", "string", "super",
    "switch", "symbol", "this", "throw", "true", "try", "type", "typeof",
    "undefined", "unknown", "var", "void", "while", "with",
}


class TypeScriptConfig:
    """TypeScript-specific configuration."""

    def __init__(self, config: GeneratorConfig):
        """Initialize TypeScript configuration from the generator config."""
        custom = config.custom or {}

        # Nullable rendering: `T | null` or `T | undefined`
        self.prefer_null_for_nullable = custom.get("prefer_null_for_nullable", True)

        # `Array<T>` or `T[]`
        self.prefer_array_generic = custom.get("prefer_array_generic", True)

        self.include_semicolon = custom.get("include_semicolon", True)
        self.prefer_unknown = custom.get("prefer_unknown", False)

        # Render referenced structs as nested object literals
        self.inline_objects = custom.get("inline_objects", False)

        # Keys of payload-carrying union variants
        self.union_tag_field = custom.get("union_tag_field", "type")
        self.union_value_field = custom.get("union_value_field", "value")

        self.export_types = config.export_types
        self.add_comments = config.add_comments
        self.line_ending = config.line_ending

        if config.indent_size < 2:
            raise ConfigError("indent_size must be greater than or equal to 2")

        if config.use_tabs:
            # 4 spaces to a tab
            self.indent = "\t" * max(1, config.indent_size // 4)
        else:
            self.indent = " " * config.indent_size

    @property
    def null_suffix(self) -> str:
        return " | null" if self.prefer_null_for_nullable else " | undefined"

    def primitives(self) -> Dict[PrimitiveKind, str]:
        """Primitive syntax table with the `any`/`unknown` preference applied."""
        table = dict(TYPESCRIPT_PRIMITIVES)
        if self.prefer_unknown:
            table[PrimitiveKind.ANY] = "unknown"
        return table
