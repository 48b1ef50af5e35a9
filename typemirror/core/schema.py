"""
Core schema representation for code generation.

Holds the resolved set of named type definitions for one generation run
in declaration order, and checks its invariants on construction so that
generators never see a partial or dangling graph.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .errors import CyclicStructure, NameCollision, UnresolvedReference
from .types import FunctionRef, NamedRef, OptionalRef, TypeRef, iter_named


@dataclass(frozen=True)
class FieldDef:
    """Represents a single field of a struct."""

    name: str
    type: TypeRef
    optional: bool = False  # key may be absent
    nullable: bool = False  # key present, value may be null
    description: Optional[str] = None

    # Raw target syntax replacing the mapped base type
    type_override: Optional[str] = None

    def with_type(self, new_type: TypeRef) -> "FieldDef":
        return replace(self, type=new_type)


@dataclass(frozen=True)
class AliasDef:
    """A named alias for another type reference."""

    name: str
    target: TypeRef
    description: Optional[str] = None


@dataclass(frozen=True)
class StructDef:
    """A product type with ordered fields."""

    name: str
    fields: Tuple[FieldDef, ...] = field(default_factory=tuple)
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

    def get_field(self, name: str) -> Optional[FieldDef]:
        """Get field by name."""
        for item in self.fields:
            if item.name == name:
                return item
        return None


@dataclass(frozen=True)
class UnionVariant:
    """One labelled variant of a union, with an optional payload."""

    label: str
    payload: Optional[TypeRef] = None


@dataclass(frozen=True)
class UnionDef:
    """A tagged set of labelled variants."""

    name: str
    variants: Tuple[UnionVariant, ...] = field(default_factory=tuple)
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.variants, tuple):
            object.__setattr__(self, "variants", tuple(self.variants))


@dataclass(frozen=True)
class FunctionAliasDef:
    """A named function signature."""

    name: str
    signature: FunctionRef
    description: Optional[str] = None


TypeDef = Union[AliasDef, StructDef, UnionDef, FunctionAliasDef]

TYPE_DEF_VARIANTS = (AliasDef, StructDef, UnionDef, FunctionAliasDef)


@dataclass(frozen=True)
class FieldRename:
    """A field renamed by the collision resolver while flattening."""

    owner: str
    original_name: str
    new_name: str
    source_path: Tuple[str, ...]  # container fields the value was inlined through


def definition_refs(definition: TypeDef) -> Iterator[Tuple[Optional[str], NamedRef]]:
    """
    Yield every named reference of a definition.

    Returns:
        Iterator of (field or variant label or None, reference) pairs
    """
    if isinstance(definition, AliasDef):
        for ref in iter_named(definition.target):
            yield None, ref
    elif isinstance(definition, StructDef):
        for item in definition.fields:
            for ref in iter_named(item.type):
                yield item.name, ref
    elif isinstance(definition, UnionDef):
        for variant in definition.variants:
            if variant.payload is not None:
                for ref in iter_named(variant.payload):
                    yield variant.label, ref
    elif isinstance(definition, FunctionAliasDef):
        for ref in iter_named(definition.signature):
            yield None, ref
    else:
        raise TypeError(f"Unhandled type definition: {definition!r}")


class SchemaGraph:
    """
    The full resolved set of named definitions for one generation run.

    The graph is immutable once built. Construction fails with a
    :class:`GeneratorError` subclass when an invariant does not hold.
    """

    def __init__(
        self,
        definitions: Iterable[TypeDef],
        roots: Optional[Iterable[str]] = None,
        type_prefix: str = "",
        renames: Iterable[FieldRename] = (),
    ):
        """
        Build and validate a graph.

        Args:
            definitions: Definitions in declaration order
            roots: Names of the definitions to emit; all when omitted
            type_prefix: Prefix used to derive this graph's identifiers
            renames: Collision renames recorded while flattening
        """
        self._definitions: Tuple[TypeDef, ...] = tuple(definitions)
        self._index: Dict[str, TypeDef] = {}

        for definition in self._definitions:
            if not isinstance(definition, TYPE_DEF_VARIANTS):
                raise TypeError(f"Unhandled type definition: {definition!r}")
            if definition.name in self._index:
                raise NameCollision(
                    "<schema>",
                    definition.name,
                    [f"{type(self._index[definition.name]).__name__} {definition.name}",
                     f"{type(definition).__name__} {definition.name}"],
                )
            self._index[definition.name] = definition

        if roots is None:
            root_names = [d.name for d in self._definitions]
        else:
            wanted = set()
            for name in roots:
                if name not in self._index:
                    raise UnresolvedReference(name)
                wanted.add(name)
            # Root set follows declaration order, not the order given
            root_names = [d.name for d in self._definitions if d.name in wanted]

        self._roots: Tuple[str, ...] = tuple(root_names)
        self.type_prefix = type_prefix
        self.renames: Tuple[FieldRename, ...] = tuple(renames)

        self._check_references()
        self._check_alias_cycles()
        self._check_struct_cycles()

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[TypeDef]:
        return iter(self._definitions)

    @property
    def definitions(self) -> Tuple[TypeDef, ...]:
        return self._definitions

    @property
    def roots(self) -> Tuple[str, ...]:
        return self._roots

    def root_definitions(self) -> List[TypeDef]:
        """Definitions in the root set, in declaration order."""
        return [self._index[name] for name in self._roots]

    def is_root(self, name: str) -> bool:
        return name in self._roots

    def get(self, name: str) -> Optional[TypeDef]:
        """Get definition by name."""
        return self._index.get(name)

    def resolve(self, name: str, owner: Optional[str] = None, field: Optional[str] = None) -> TypeDef:
        """
        Resolve a named reference.

        Raises:
            UnresolvedReference: If no definition has this name
        """
        definition = self._index.get(name)
        if definition is None:
            raise UnresolvedReference(name, owner, field)
        return definition

    def follow(self, ref: TypeRef) -> Tuple[Union[TypeRef, TypeDef], bool]:
        """
        Follow ``OptionalRef``, named and alias indirection from ``ref``.

        Stops at the first reference that is not one of those, or at a
        named definition that is not an alias.

        Returns:
            Tuple of (reference or definition reached, whether an
            ``OptionalRef`` wrapper was crossed on the way)
        """
        wrapped = False
        seen: List[str] = []
        current: Union[TypeRef, TypeDef] = ref

        while True:
            if isinstance(current, OptionalRef):
                wrapped = True
                current = current.inner
            elif isinstance(current, NamedRef):
                if current.identifier in seen:
                    raise CyclicStructure(seen + [current.identifier])
                seen.append(current.identifier)
                current = self.resolve(current.identifier)
            elif isinstance(current, AliasDef):
                current = current.target
            else:
                return current, wrapped

    def struct_of(self, ref: TypeRef) -> Tuple[Optional[StructDef], bool]:
        """Return the struct ``ref`` resolves to, if any, and the wrapped flag."""
        target, wrapped = self.follow(ref)
        if isinstance(target, StructDef):
            return target, wrapped
        return None, wrapped

    def dependencies(self, name: str) -> List[str]:
        """
        Names reachable from a definition through named references.

        Returns:
            Names in first-reference order, excluding ``name`` itself
        """
        ordered: List[str] = []
        pending = [name]
        seen = {name}

        while pending:
            current = self.resolve(pending.pop(0))
            for _, ref in definition_refs(current):
                if ref.identifier not in seen:
                    seen.add(ref.identifier)
                    ordered.append(ref.identifier)
                    pending.append(ref.identifier)

        return ordered

    def _check_references(self):
        for definition in self._definitions:
            for location, ref in definition_refs(definition):
                if ref.identifier not in self._index:
                    raise UnresolvedReference(ref.identifier, definition.name, location)

    def _check_alias_cycles(self):
        for definition in self._definitions:
            if isinstance(definition, AliasDef):
                # follow() raises on a cycle
                self.follow(NamedRef(definition.name))

    def _contained_structs(self, struct: StructDef) -> List[str]:
        """Structs held by value through required fields of ``struct``."""
        contained = []
        for item in struct.fields:
            if item.optional or item.nullable:
                continue
            target, wrapped = self.follow(item.type)
            if isinstance(target, StructDef) and not wrapped:
                contained.append(target.name)
        return contained

    def _check_struct_cycles(self):
        # Only required by-value containment counts; optional recursion is fine
        done = set()

        def visit(name: str, path: List[str]):
            if name in path:
                raise CyclicStructure(path[path.index(name):] + [name])
            if name in done:
                return
            path.append(name)
            for child in self._contained_structs(self._index[name]):
                visit(child, path)
            path.pop()
            done.add(name)

        for definition in self._definitions:
            if isinstance(definition, StructDef):
                visit(definition.name, [])

    def summary(self) -> Dict[str, int]:
        """Count definitions per kind, for logging."""
        counts = {"alias": 0, "struct": 0, "union": 0, "function": 0, "roots": len(self._roots)}
        for definition in self._definitions:
            if isinstance(definition, AliasDef):
                counts["alias"] += 1
            elif isinstance(definition, StructDef):
                counts["struct"] += 1
            elif isinstance(definition, UnionDef):
                counts["union"] += 1
            else:
                counts["function"] += 1
        return counts

