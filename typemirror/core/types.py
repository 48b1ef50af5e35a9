"""
Type references used throughout the schema graph.

A type reference is one of a closed set of variants: a primitive kind, a
reference to a named definition, or a container wrapping other references.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple, Union


class PrimitiveKind(Enum):
    """Primitive and semantic scalar kinds known to the mapping table."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    BYTE = "byte"
    TIMESTAMP = "timestamp"  # no native target equivalent, see override slot
    ANY = "any"


@dataclass(frozen=True)
class PrimitiveRef:
    """A primitive or semantic scalar kind."""

    kind: PrimitiveKind


@dataclass(frozen=True)
class NamedRef:
    """A reference to a definition in the owning graph."""

    identifier: str


@dataclass(frozen=True)
class ArrayRef:
    """Sequence of elements of a single type."""

    element: "TypeRef"


@dataclass(frozen=True)
class MapRef:
    """Mapping from key type to value type."""

    key: "TypeRef"
    value: "TypeRef"


@dataclass(frozen=True)
class OptionalRef:
    """A value that may be the null sentinel."""

    inner: "TypeRef"


@dataclass(frozen=True)
class FunctionRef:
    """Function signature with ordered positional parameters."""

    params: Tuple["TypeRef", ...] = field(default_factory=tuple)
    returns: Optional["TypeRef"] = None

    def __post_init__(self):
        # Accept lists from callers, keep the stored value hashable
        if not isinstance(self.params, tuple):
            object.__setattr__(self, "params", tuple(self.params))


TypeRef = Union[PrimitiveRef, NamedRef, ArrayRef, MapRef, OptionalRef, FunctionRef]


def children(ref: TypeRef) -> Tuple[TypeRef, ...]:
    """Return the directly nested references of a type reference."""
    if isinstance(ref, (PrimitiveRef, NamedRef)):
        return ()
    if isinstance(ref, ArrayRef):
        return (ref.element,)
    if isinstance(ref, MapRef):
        return (ref.key, ref.value)
    if isinstance(ref, OptionalRef):
        return (ref.inner,)
    if isinstance(ref, FunctionRef):
        if ref.returns is None:
            return ref.params
        return ref.params + (ref.returns,)
    raise TypeError(f"Unhandled type reference: {ref!r}")


def iter_named(ref: TypeRef) -> Iterator[NamedRef]:
    """Yield every named reference inside ``ref``, depth first, in order."""
    if isinstance(ref, NamedRef):
        yield ref
        return
    for child in children(ref):
        yield from iter_named(child)


def unwrap_optional(ref: TypeRef) -> Tuple[TypeRef, bool]:
    """
    Strip any ``OptionalRef`` wrappers.

    Returns:
        Tuple of (innermost reference, whether any wrapper was removed)
    """
    wrapped = False
    while isinstance(ref, OptionalRef):
        ref = ref.inner
        wrapped = True
    return ref, wrapped


def rename_refs(ref: TypeRef, rename) -> TypeRef:
    """
    Rebuild ``ref`` with every named identifier passed through ``rename``.

    Args:
        ref: Reference to rebuild
        rename: Callable mapping an old identifier to a new one

    Returns:
        New reference; unchanged sub-trees are shared
    """
    if isinstance(ref, PrimitiveRef):
        return ref
    if isinstance(ref, NamedRef):
        new_name = rename(ref.identifier)
        return ref if new_name == ref.identifier else NamedRef(new_name)
    if isinstance(ref, ArrayRef):
        return ArrayRef(rename_refs(ref.element, rename))
    if isinstance(ref, MapRef):
        return MapRef(rename_refs(ref.key, rename), rename_refs(ref.value, rename))
    if isinstance(ref, OptionalRef):
        return OptionalRef(rename_refs(ref.inner, rename))
    if isinstance(ref, FunctionRef):
        returns = None if ref.returns is None else rename_refs(ref.returns, rename)
        return FunctionRef(tuple(rename_refs(p, rename) for p in ref.params), returns)
    raise TypeError(f"Unhandled type reference: {ref!r}")


def describe(ref: TypeRef) -> str:
    """Human readable rendering used in log and error messages."""
    if isinstance(ref, PrimitiveRef):
        return ref.kind.value
    if isinstance(ref, NamedRef):
        return ref.identifier
    if isinstance(ref, ArrayRef):
        return f"array<{describe(ref.element)}>"
    if isinstance(ref, MapRef):
        return f"map<{describe(ref.key)}, {describe(ref.value)}>"
    if isinstance(ref, OptionalRef):
        return f"optional<{describe(ref.inner)}>"
    if isinstance(ref, FunctionRef):
        params = ", ".join(describe(p) for p in ref.params)
        returns = "void" if ref.returns is None else describe(ref.returns)
        return f"fn({params}) -> {returns}"
    raise TypeError(f"Unhandled type reference: {ref!r}")


# Shorthand constructors
INTEGER = PrimitiveRef(PrimitiveKind.INTEGER)
FLOAT = PrimitiveRef(PrimitiveKind.FLOAT)
STRING = PrimitiveRef(PrimitiveKind.STRING)
BOOLEAN = PrimitiveRef(PrimitiveKind.BOOLEAN)
BYTE = PrimitiveRef(PrimitiveKind.BYTE)
TIMESTAMP = PrimitiveRef(PrimitiveKind.TIMESTAMP)
ANY = PrimitiveRef(PrimitiveKind.ANY)
