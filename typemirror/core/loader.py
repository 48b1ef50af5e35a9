"""
Schema document loading.

Builds a :class:`SchemaGraph` from a JSON document describing already
resolved definitions. A bare string type is a primitive kind name; an
object type uses exactly one of ``named``, ``array``, ``map``,
``optional`` or ``function``.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..logging_config import get_logger
from .errors import GeneratorError
from .schema import (
    AliasDef,
    FieldDef,
    FunctionAliasDef,
    SchemaGraph,
    StructDef,
    TypeDef,
    UnionDef,
    UnionVariant,
)
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

logger = get_logger(__name__)

TYPE_KEYS = ("named", "array", "map", "optional", "function")


class SchemaDocumentError(GeneratorError):
    """Exception raised for malformed schema documents."""

    pass


def parse_type(raw: Any, where: str = "type") -> TypeRef:
    """
    Parse one type expression.

    Args:
        raw: Primitive kind name or single-key object
        where: Location used in error messages

    Raises:
        SchemaDocumentError: If the expression is malformed
    """
    if isinstance(raw, str):
        try:
            return PrimitiveRef(PrimitiveKind(raw))
        except ValueError:
            raise SchemaDocumentError(f"{where}: unknown primitive kind '{raw}'")

    if not isinstance(raw, dict):
        raise SchemaDocumentError(f"{where}: expected a string or an object, got {type(raw).__name__}")

    keys = [k for k in TYPE_KEYS if k in raw]
    if len(keys) != 1:
        raise SchemaDocumentError(f"{where}: expected exactly one of {', '.join(TYPE_KEYS)}")

    key = keys[0]
    value = raw[key]

    if key == "named":
        if not isinstance(value, str) or not value:
            raise SchemaDocumentError(f"{where}: 'named' must be a non-empty string")
        return NamedRef(value)
    if key == "array":
        return ArrayRef(parse_type(value, f"{where}.array"))
    if key == "optional":
        return OptionalRef(parse_type(value, f"{where}.optional"))
    if key == "map":
        if not isinstance(value, list) or len(value) != 2:
            raise SchemaDocumentError(f"{where}: 'map' must be a [key, value] pair")
        return MapRef(parse_type(value[0], f"{where}.map[0]"), parse_type(value[1], f"{where}.map[1]"))
    return _parse_function(value, f"{where}.function")


def _parse_function(raw: Any, where: str) -> FunctionRef:
    if not isinstance(raw, dict):
        raise SchemaDocumentError(f"{where}: expected an object with 'params' and 'returns'")

    params = raw.get("params", [])
    if not isinstance(params, list):
        raise SchemaDocumentError(f"{where}: 'params' must be a list")

    returns = raw.get("returns")
    return FunctionRef(
        params=tuple(parse_type(p, f"{where}.params[{i}]") for i, p in enumerate(params)),
        returns=None if returns is None else parse_type(returns, f"{where}.returns"),
    )


def _require_name(raw: Dict[str, Any], where: str) -> str:
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaDocumentError(f"{where}: missing 'name'")
    return name


def _parse_field(raw: Any, where: str) -> FieldDef:
    if not isinstance(raw, dict):
        raise SchemaDocumentError(f"{where}: field must be an object")

    name = _require_name(raw, where)
    if "type" not in raw:
        raise SchemaDocumentError(f"{where}.{name}: missing 'type'")

    return FieldDef(
        name=name,
        type=parse_type(raw["type"], f"{where}.{name}"),
        optional=bool(raw.get("optional", False)),
        nullable=bool(raw.get("nullable", False)),
        description=raw.get("description"),
        type_override=raw.get("type_override"),
    )


def parse_definition(raw: Any, index: int = 0) -> TypeDef:
    """Parse one entry of the ``definitions`` list."""
    where = f"definitions[{index}]"
    if not isinstance(raw, dict):
        raise SchemaDocumentError(f"{where}: definition must be an object")

    kind = raw.get("kind")
    name = _require_name(raw, where)
    where = f"{name}"
    description = raw.get("description")

    if kind == "struct":
        fields = raw.get("fields", [])
        if not isinstance(fields, list):
            raise SchemaDocumentError(f"{where}: 'fields' must be a list")
        return StructDef(name, tuple(_parse_field(f, where) for f in fields), description)

    if kind == "alias":
        if "type" not in raw:
            raise SchemaDocumentError(f"{where}: missing 'type'")
        return AliasDef(name, parse_type(raw["type"], where), description)

    if kind == "union":
        variants = []
        for variant in raw.get("variants", []):
            if not isinstance(variant, dict) or not isinstance(variant.get("label"), str):
                raise SchemaDocumentError(f"{where}: every variant needs a string 'label'")
            payload = variant.get("payload")
            variants.append(
                UnionVariant(
                    variant["label"],
                    None if payload is None else parse_type(payload, f"{where}.{variant['label']}"),
                )
            )
        return UnionDef(name, tuple(variants), description)

    if kind == "function":
        return FunctionAliasDef(name, _parse_function(raw, where), description)

    raise SchemaDocumentError(f"{where}: unknown definition kind '{kind}'")


def load_schema_document(document: Dict[str, Any]) -> SchemaGraph:
    """
    Build a schema graph from a parsed document.

    Raises:
        SchemaDocumentError: If the document is malformed
        GeneratorError: If the resulting graph violates an invariant
    """
    if not isinstance(document, dict):
        raise SchemaDocumentError("Schema document must be a JSON object")

    raw_definitions = document.get("definitions")
    if not isinstance(raw_definitions, list):
        raise SchemaDocumentError("Schema document needs a 'definitions' list")

    definitions: List[TypeDef] = [parse_definition(raw, i) for i, raw in enumerate(raw_definitions)]

    roots: Optional[List[str]] = document.get("roots")
    if roots is not None and not (isinstance(roots, list) and all(isinstance(r, str) for r in roots)):
        raise SchemaDocumentError("'roots' must be a list of definition names")

    graph = SchemaGraph(definitions, roots=roots)
    logger.debug("Loaded schema graph: %s", graph.summary())
    return graph


def load_schema_file(path: Union[str, Path]) -> SchemaGraph:
    """
    Load a schema graph from a JSON file.

    Raises:
        SchemaDocumentError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise SchemaDocumentError(f"Invalid JSON in schema file {path}: {e}") from e
    except OSError as e:
        raise SchemaDocumentError(f"Failed to read schema file {path}: {e}") from e

    return load_schema_document(document)
