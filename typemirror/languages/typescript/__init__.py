"""
TypeScript code generator module.

Emits TypeScript type declarations from a schema graph.
"""

from typing import Any, Dict, Optional

from ...core.config import GeneratorConfig, load_config
from .config import FILE_HEADER, TYPESCRIPT_PRIMITIVES, TypeScriptConfig
from .generator import TypeScriptGenerator, create_typescript_generator
from .naming import TypeScriptSanitizer, create_typescript_sanitizer
from .types import EmitContext, TypeScriptTypeMapper

__all__ = [
    "FILE_HEADER",
    "TYPESCRIPT_PRIMITIVES",
    "EmitContext",
    "TypeScriptConfig",
    "TypeScriptGenerator",
    "TypeScriptSanitizer",
    "TypeScriptTypeMapper",
    "create_typescript_generator",
    "create_typescript_sanitizer",
    # Factory functions
    "create_generator",
    "create_flattened_generator",
]


def create_generator(profile: str = "default", **overrides: Any) -> TypeScriptGenerator:
    """
    Create a TypeScript generator from a built-in profile.

    Args:
        profile: Built-in profile name
        **overrides: Configuration keys to override (e.g. export_types=True)

    Returns:
        Configured TypeScriptGenerator instance
    """
    custom: Optional[Dict[str, Any]] = dict(overrides) if overrides else None
    config: GeneratorConfig = load_config(profile, custom_config=custom)
    return TypeScriptGenerator(config)


def create_flattened_generator(timestamp_alias: bool = False, **overrides: Any) -> TypeScriptGenerator:
    """
    Create a generator that flattens nested structs.

    Features:
    - Every emitted identifier prefixed with ``Flattened_``
    - Exported declarations, four-space indentation
    - Timestamps inline as ``string``, or through one ``Flattened_Timestamp``
      alias when ``timestamp_alias`` is set
    """
    profile = "flattened-alias" if timestamp_alias else "flattened"
    return create_generator(profile, **overrides)
