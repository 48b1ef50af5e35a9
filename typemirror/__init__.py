"""
typemirror: TypeScript declarations from a resolved schema graph.

Generates ``type`` declarations in declaration order, optionally flattening
nested structs into their containers and routing semantic scalars such as
timestamps through a configurable override slot.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core.config import GeneratorConfig, load_config
from .core.errors import GeneratorError
from .core.generator import GenerationResult, generate_code
from .core.loader import load_schema_file
from .core.schema import SchemaGraph
from .registry import GeneratorRegistry, get_generator, list_supported_languages

__version__ = "0.1.0"

__all__ = [
    "GeneratorConfig",
    "GeneratorError",
    "GenerationResult",
    "GeneratorRegistry",
    "SchemaGraph",
    "generate_code",
    "generate_from_graph",
    "generate_from_file",
    "get_generator",
    "list_supported_languages",
    "load_config",
]


def generate_from_graph(
    graph: SchemaGraph,
    language: str = "typescript",
    profile: str = "default",
    config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None,
) -> GenerationResult:
    """
    Generate code for a schema graph.

    Args:
        graph: Resolved schema graph
        language: Target language name
        profile: Built-in profile used when ``config`` is not a GeneratorConfig
        config: Complete configuration, or overrides applied over ``profile``

    Returns:
        GenerationResult with generated code
    """
    if not isinstance(config, GeneratorConfig):
        config = load_config(profile, custom_config=config)

    generator = get_generator(language, config)
    return generate_code(generator, graph)


def generate_from_file(
    path: Union[str, Path],
    language: str = "typescript",
    profile: str = "default",
    config: Optional[Union[GeneratorConfig, Dict[str, Any]]] = None,
) -> GenerationResult:
    """Load a JSON schema document and generate code for it."""
    return generate_from_graph(load_schema_file(path), language, profile, config)
