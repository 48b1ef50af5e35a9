"""
Error types raised while resolving, flattening and emitting a schema graph.

Every error is fatal for the run that raised it: nothing is retried and no
partial output is produced.
"""

from typing import Iterable, List, Optional, Sequence


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class UnresolvedReference(GeneratorError):
    """A named reference has no matching definition in the graph."""

    def __init__(self, identifier: str, owner: Optional[str] = None, field: Optional[str] = None):
        self.identifier = identifier
        self.owner = owner
        self.field = field

        location = owner or "<root set>"
        if field:
            location = f"{location}.{field}"
        super().__init__(f"Unresolved reference to '{identifier}' in {location}")


class CyclicStructure(GeneratorError):
    """Struct nesting or alias indirection forms a cycle."""

    def __init__(self, members: Sequence[str]):
        self.members: List[str] = list(members)
        chain = " -> ".join(self.members)
        super().__init__(f"Cyclic structure detected: {chain}")


class NameCollision(GeneratorError):
    """Two fields or definitions ended up with the same name."""

    def __init__(self, owner: str, name: str, sources: Iterable[str]):
        self.owner = owner
        self.name = name
        self.sources: List[str] = list(sources)
        super().__init__(
            f"Name collision in {owner}: '{name}' is contributed by "
            f"{', '.join(self.sources)}"
        )


class UnmappedPrimitive(GeneratorError):
    """A primitive kind has no mapping table entry and no override."""

    def __init__(self, kind: str, owner: Optional[str] = None):
        self.kind = kind
        self.owner = owner
        where = f" (used by {owner})" if owner else ""
        super().__init__(f"No mapping configured for primitive kind '{kind}'{where}")


class UnsupportedType(GeneratorError):
    """A type shape the target language cannot represent."""

    pass
