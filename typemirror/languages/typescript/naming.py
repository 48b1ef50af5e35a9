"""
TypeScript-specific naming utilities.

Handles reserved words and property-name quoting.
"""

import json

from ...core.naming import NameSanitizer
from .config import TYPESCRIPT_RESERVED_WORDS


class TypeScriptSanitizer(NameSanitizer):
    """Name checks for TypeScript declarations."""

    def __init__(self):
        super().__init__(TYPESCRIPT_RESERVED_WORDS)

    def property_name(self, name: str) -> str:
        """
        Render a property key.

        Reserved words are valid property keys in object types; anything
        that is not an identifier is written as a string literal.
        """
        if self.is_valid_identifier(name):
            return name
        return json.dumps(name)

    def is_valid_type_name(self, name: str) -> bool:
        """Whether ``name`` can be declared with ``type name = ...``."""
        return self.is_valid_identifier(name) and not self.is_reserved(name)


def create_typescript_sanitizer() -> TypeScriptSanitizer:
    """Create a sanitizer configured for TypeScript."""
    return TypeScriptSanitizer()
