"""
Struct flattening transform.

Produces a new schema graph in which every struct-typed field of a carried
struct is replaced, in place, by the fields of the struct it references.
Every carried definition is registered under a derived identifier so the
flattened output never collides with the unflattened one.
"""

from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .collisions import CollisionResolver, CollisionStrategy, FlatField
from .config import ConfigError, GeneratorConfig
from .errors import CyclicStructure, UnresolvedReference
from .naming import NameSanitizer, NamingCase
from .schema import (
    AliasDef,
    FieldRename,
    FunctionAliasDef,
    SchemaGraph,
    StructDef,
    TypeDef,
    UnionDef,
    definition_refs,
)
from .types import TypeRef, rename_refs

logger = get_logger(__name__)


@dataclass(frozen=True)
class FlattenPolicy:
    """
    Flattening configuration.

    Attributes:
        inline_fields: Fields to inline, as ``"Struct.field"`` or bare
            ``"field"`` entries; ``None`` inlines every struct-typed field
        prefix: Prepended to every derived identifier
        suffix: Appended to every derived identifier
        collision_strategy: Fail or rename on duplicate field names
        rename_case: Case used when qualifying renamed fields
        drop_inlined: Leave out struct roots that were inlined elsewhere
            and are not referenced by name from the flattened output
    """

    inline_fields: Optional[FrozenSet[str]] = None
    prefix: str = "Flattened_"
    suffix: str = ""
    collision_strategy: CollisionStrategy = CollisionStrategy.ERROR
    rename_case: NamingCase = NamingCase.SNAKE_CASE
    drop_inlined: bool = True

    def __post_init__(self):
        if not (self.prefix or self.suffix):
            raise ConfigError("Flattening needs a type prefix or suffix to derive new identifiers")
        if self.inline_fields is not None and not isinstance(self.inline_fields, frozenset):
            object.__setattr__(self, "inline_fields", frozenset(self.inline_fields))

    def derive_name(self, name: str) -> str:
        """Identifier of the flattened counterpart of ``name``."""
        return f"{self.prefix}{name}{self.suffix}"

    def should_inline(self, owner: str, field_name: str) -> bool:
        if self.inline_fields is None:
            return True
        return field_name in self.inline_fields or f"{owner}.{field_name}" in self.inline_fields

    @classmethod
    def from_config(cls, config: GeneratorConfig) -> "FlattenPolicy":
        """
        Build a policy from generator configuration.

        With ``flatten`` disabled the policy inlines nothing and only
        applies the naming scheme.
        """
        try:
            strategy = CollisionStrategy(config.collision_strategy)
        except ValueError:
            raise ConfigError(f"Invalid collision_strategy: {config.collision_strategy}")

        try:
            case = NamingCase(config.rename_case)
        except ValueError:
            raise ConfigError(f"Invalid rename_case: {config.rename_case}")

        if not config.flatten:
            inline_fields = frozenset()
        elif config.flatten_fields is None:
            inline_fields = None
        else:
            inline_fields = frozenset(config.flatten_fields)

        return cls(
            inline_fields=inline_fields,
            prefix=config.type_prefix,
            suffix=config.flatten_suffix,
            collision_strategy=strategy,
            rename_case=case,
            drop_inlined=config.drop_inlined,
        )


class _Pass:
    """State of one walk over the source graph."""

    def __init__(self, transform: "FlattenTransform", roots: Iterable[str]):
        self.transform = transform
        self.graph = transform.graph
        self.policy = transform.policy

        self.carried: Dict[str, TypeDef] = {}
        self.pending: List[str] = list(roots)
        self.queued: Set[str] = set(self.pending)
        self.referenced: Set[str] = set()  # carried because something names them
        self.inlined: Set[str] = set()
        self.function_refs: List[str] = []
        self.renames: List[FieldRename] = []

    def run(self):
        while self.pending:
            name = self.pending.pop(0)
            source = self.graph.resolve(name)
            self.carried[name] = self._transform(source)

    def _carry(self, name: str) -> str:
        self.referenced.add(name)
        if name not in self.queued:
            self.queued.add(name)
            self.pending.append(name)
        return self.policy.derive_name(name)

    def _rename(self, ref: TypeRef) -> TypeRef:
        return rename_refs(ref, self._carry)

    def _transform(self, source: TypeDef) -> TypeDef:
        derived = self.policy.derive_name(source.name)

        if isinstance(source, StructDef):
            return self._flatten_struct(source, derived)
        if isinstance(source, AliasDef):
            return replace(source, name=derived, target=self._rename(source.target))
        if isinstance(source, UnionDef):
            variants = tuple(
                v if v.payload is None else replace(v, payload=self._rename(v.payload))
                for v in source.variants
            )
            return replace(source, name=derived, variants=variants)
        if isinstance(source, FunctionAliasDef):
            # Call shape is kept: parameters keep pointing at the originals
            for _, ref in definition_refs(source):
                if ref.identifier not in self.function_refs:
                    self.function_refs.append(ref.identifier)
            return replace(source, name=derived)
        raise TypeError(f"Unhandled type definition: {source!r}")

    def _flatten_struct(self, struct: StructDef, derived: str) -> StructDef:
        flat: List[FlatField] = []
        self._collect(struct, (), [struct.name], False, flat)

        fields, renames = self.transform.resolver.resolve(derived, flat)
        self.renames.extend(renames)
        return replace(struct, name=derived, fields=tuple(fields))

    def _collect(
        self,
        struct: StructDef,
        path: Tuple[str, ...],
        nesting: List[str],
        outer_optional: bool,
        out: List[FlatField],
    ):
        for item in struct.fields:
            if item.type_override is None and self.policy.should_inline(struct.name, item.name):
                try:
                    nested, wrapped = self.graph.struct_of(item.type)
                except UnresolvedReference as e:
                    raise UnresolvedReference(e.identifier, struct.name, item.name) from e

                if nested is not None:
                    if nested.name in nesting:
                        start = nesting.index(nested.name)
                        raise CyclicStructure(nesting[start:] + [nested.name])

                    self.inlined.add(nested.name)
                    # Absent or null container leaves every inlined value absent
                    contained_optional = outer_optional or item.optional or item.nullable or wrapped
                    self._collect(
                        nested,
                        path + (item.name,),
                        nesting + [nested.name],
                        contained_optional,
                        out,
                    )
                    continue

            composed = replace(
                item,
                type=self._rename(item.type),
                optional=item.optional or outer_optional,
            )
            out.append(FlatField(composed, path, f"{struct.name}.{item.name}"))


class FlattenTransform:
    """Applies a :class:`FlattenPolicy` to a schema graph."""

    def __init__(self, graph: SchemaGraph, policy: FlattenPolicy):
        self.graph = graph
        self.policy = policy
        self.resolver = CollisionResolver(
            strategy=policy.collision_strategy,
            case=policy.rename_case,
            sanitizer=NameSanitizer(),
        )

    def apply(self) -> SchemaGraph:
        """
        Build the flattened graph; the input graph is left untouched.

        Raises:
            CyclicStructure: If a struct transitively contains itself
            UnresolvedReference: If a reference cannot be resolved
            NameCollision: On duplicate field names under the error strategy
        """
        roots = list(self.graph.roots)

        if self.policy.drop_inlined:
            probe = _Pass(self, roots)
            probe.run()
            dropped = [
                name
                for name in roots
                if name in probe.inlined
                and name not in probe.referenced
                and isinstance(self.graph.get(name), StructDef)
            ]
            if dropped:
                logger.debug("Dropping inlined struct roots: %s", ", ".join(dropped))
                roots = [name for name in roots if name not in dropped]

        final = _Pass(self, roots)
        final.run()
        for rename in final.renames:
            logger.warning(
                "Renamed %s.%s to %s to avoid a collision (inlined via %s)",
                rename.owner,
                rename.original_name,
                rename.new_name,
                ".".join(rename.source_path),
            )

        definitions: List[TypeDef] = []
        for source in self.graph.definitions:
            if source.name in final.carried:
                definitions.append(final.carried[source.name])

        derived_roots = [d.name for d in definitions]

        # Originals that function signatures still point at
        retained: List[str] = []
        for name in final.function_refs:
            for dependency in [name] + self.graph.dependencies(name):
                if dependency not in retained:
                    retained.append(dependency)
        for source in self.graph.definitions:
            if source.name in retained:
                definitions.append(source)

        flattened = SchemaGraph(
            definitions,
            roots=derived_roots,
            type_prefix=self.policy.prefix,
            renames=final.renames,
        )
        logger.debug(
            "Flattened %d definitions into %d (%d retained, %d renames)",
            len(self.graph),
            len(derived_roots),
            len(retained),
            len(final.renames),
        )
        return flattened


def flatten_graph(graph: SchemaGraph, policy: FlattenPolicy) -> SchemaGraph:
    """Convenience wrapper around :class:`FlattenTransform`."""
    return FlattenTransform(graph, policy).apply()
