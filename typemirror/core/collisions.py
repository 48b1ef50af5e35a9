"""
Collision detection and renaming for flattened struct fields.

Inlining nested structs can bring two fields with the same name into one
struct. Depending on the strategy the resolver either fails the run or
qualifies the inlined fields with the container field they came from.
"""

from collections import OrderedDict
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from .errors import NameCollision
from .naming import NameSanitizer, NamingCase
from .schema import FieldDef, FieldRename


class CollisionStrategy(Enum):
    """What to do when flattening produces duplicate field names."""

    ERROR = "error"
    RENAME = "rename"


@dataclass(frozen=True)
class FlatField:
    """A field of a flattened struct together with where it came from."""

    field: FieldDef
    path: Tuple[str, ...] = ()  # container field names, outermost first
    origin: str = ""  # declaring struct and field, e.g. "Address.city"

    @property
    def inlined(self) -> bool:
        return bool(self.path)

    def describe(self) -> str:
        if not self.path:
            return self.origin
        return f"{self.origin} (via {'.'.join(self.path)})"


class CollisionResolver:
    """Checks flattened field lists for duplicate names."""

    def __init__(
        self,
        strategy: CollisionStrategy = CollisionStrategy.ERROR,
        case: NamingCase = NamingCase.SNAKE_CASE,
        sanitizer: NameSanitizer = None,
    ):
        self.strategy = strategy
        self.case = case
        self.sanitizer = sanitizer or NameSanitizer()

    def resolve(self, owner: str, fields: Sequence[FlatField]) -> Tuple[List[FieldDef], List[FieldRename]]:
        """
        Return the final field list of ``owner`` and the renames applied.

        Args:
            owner: Identifier of the struct being built
            fields: Flattened fields in order

        Raises:
            NameCollision: Under the error strategy on any duplicate, and
                under the rename strategy when two directly declared
                fields share a name
        """
        groups: Dict[str, List[int]] = OrderedDict()
        for index, item in enumerate(fields):
            groups.setdefault(item.field.name, []).append(index)

        to_rename = set()
        for name, indexes in groups.items():
            if len(indexes) < 2:
                continue

            sources = [fields[i].describe() for i in indexes]
            if self.strategy == CollisionStrategy.ERROR:
                raise NameCollision(owner, name, sources)

            direct = [i for i in indexes if not fields[i].inlined]
            if len(direct) > 1:
                raise NameCollision(owner, name, [fields[i].describe() for i in direct])

            to_rename.update(i for i in indexes if fields[i].inlined)

        if not to_rename:
            return [item.field for item in fields], []

        used = {item.field.name for i, item in enumerate(fields) if i not in to_rename}
        result: List[FieldDef] = []
        renames: List[FieldRename] = []

        for index, item in enumerate(fields):
            if index not in to_rename:
                result.append(item.field)
                continue

            new_name = self._qualified_name(item, used)
            used.add(new_name)
            result.append(replace(item.field, name=new_name))
            renames.append(FieldRename(owner, item.field.name, new_name, item.path))

        return result, renames

    def _qualified_name(self, item: FlatField, used) -> str:
        # Immediate parent first, then the whole chain, then a counter
        name = item.field.name
        candidate = self.sanitizer.qualify([item.path[-1], name], self.case)
        if candidate in used:
            candidate = self.sanitizer.qualify(list(item.path) + [name], self.case)
        return self.sanitizer.unique_name(candidate, used)
