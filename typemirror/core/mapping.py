"""
Mapping table from primitive kinds to target-language syntax.

Semantic scalar kinds without a native target equivalent (timestamps) go
through the override slot: either an inline primitive at every use site,
or a generated alias definition emitted once and referenced by name.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .config import ConfigError, GeneratorConfig
from .errors import UnmappedPrimitive
from .types import PrimitiveKind


class OverrideMode(Enum):
    """How an overridden scalar kind is rendered."""

    INLINE = "inline"  # concrete primitive at each use site
    ALIAS = "alias"  # reference to a generated alias definition


@dataclass(frozen=True)
class ScalarOverride:
    """Override slot entry for one primitive kind."""

    mode: OverrideMode
    target: str
    alias_name: Optional[str] = None


@dataclass(frozen=True)
class ScalarMapping:
    """Result of looking up a primitive kind."""

    syntax: str
    alias_name: Optional[str] = None  # set when the use site must reference an alias

    @property
    def is_alias(self) -> bool:
        return self.alias_name is not None


def _default_alias_name(kind: PrimitiveKind) -> str:
    return kind.value.capitalize()


class MappingTable:
    """
    Immutable lookup from primitive kinds to target syntax.

    The table is a pure value: generation runs share it freely.
    """

    def __init__(
        self,
        primitives: Mapping[PrimitiveKind, str],
        overrides: Optional[Mapping[PrimitiveKind, ScalarOverride]] = None,
    ):
        self._primitives: Dict[PrimitiveKind, str] = dict(primitives)
        self._overrides: Dict[PrimitiveKind, ScalarOverride] = dict(overrides or {})

    @property
    def overrides(self) -> Dict[PrimitiveKind, ScalarOverride]:
        return dict(self._overrides)

    def lookup(self, kind: PrimitiveKind, owner: Optional[str] = None) -> ScalarMapping:
        """
        Resolve a primitive kind.

        Args:
            kind: Kind to resolve
            owner: Definition being rendered, for error context

        Returns:
            ScalarMapping with the concrete syntax and, in alias mode, the
            unprefixed alias identifier

        Raises:
            UnmappedPrimitive: If neither the table nor an override covers the kind
        """
        override = self._overrides.get(kind)
        if override is not None:
            if override.mode == OverrideMode.ALIAS:
                alias_name = override.alias_name or _default_alias_name(kind)
                return ScalarMapping(syntax=override.target, alias_name=alias_name)
            return ScalarMapping(syntax=override.target)

        syntax = self._primitives.get(kind)
        if syntax is None:
            raise UnmappedPrimitive(kind.value, owner)
        return ScalarMapping(syntax=syntax)

    def with_override(self, kind: PrimitiveKind, override: ScalarOverride) -> "MappingTable":
        """Return a copy of this table with one override slot set."""
        overrides = dict(self._overrides)
        overrides[kind] = override
        return MappingTable(self._primitives, overrides)

    def with_primitive(self, kind: PrimitiveKind, syntax: str) -> "MappingTable":
        """Return a copy of this table with one primitive entry replaced."""
        primitives = dict(self._primitives)
        primitives[kind] = syntax
        return MappingTable(primitives, self._overrides)

    def without(self, kind: PrimitiveKind) -> "MappingTable":
        """Return a copy with no entry and no override for ``kind``."""
        primitives = dict(self._primitives)
        primitives.pop(kind, None)
        overrides = dict(self._overrides)
        overrides.pop(kind, None)
        return MappingTable(primitives, overrides)

    @classmethod
    def from_config(cls, config: GeneratorConfig, primitives: Mapping[PrimitiveKind, str]) -> "MappingTable":
        """
        Build a table from language defaults and ``config.scalar_overrides``.

        Args:
            config: Generator configuration
            primitives: The target language's default primitive syntax

        Raises:
            ConfigError: If an override entry is malformed
        """
        overrides = {}
        for kind_name, raw in (config.scalar_overrides or {}).items():
            kind = parse_kind(kind_name)
            overrides[kind] = parse_override(kind, raw, primitives.get(kind))
        return cls(primitives, overrides)


def parse_kind(name: str) -> PrimitiveKind:
    """Parse a primitive kind name, raising ConfigError when unknown."""
    try:
        return PrimitiveKind(name)
    except ValueError:
        valid = ", ".join(k.value for k in PrimitiveKind)
        raise ConfigError(f"Unknown primitive kind: {name} (expected one of {valid})")


def parse_override(kind: PrimitiveKind, raw: Any, default_target: Optional[str]) -> ScalarOverride:
    """
    Parse one ``scalar_overrides`` entry.

    Accepts either a bare mode string (``"inline"``/``"alias"``) or an
    object with ``mode``, ``target`` and ``alias`` keys.
    """
    if isinstance(raw, str):
        raw = {"mode": raw}
    if not isinstance(raw, dict):
        raise ConfigError(f"Override for '{kind.value}' must be a string or an object")

    try:
        mode = OverrideMode(raw.get("mode", OverrideMode.INLINE.value))
    except ValueError:
        raise ConfigError(f"Invalid override mode for '{kind.value}': {raw.get('mode')}")

    target = raw.get("target", default_target)
    if not target:
        raise ConfigError(f"Override for '{kind.value}' has no target syntax")

    alias_name = raw.get("alias")
    if alias_name is not None and not str(alias_name).isidentifier():
        raise ConfigError(f"Invalid alias name for '{kind.value}': {alias_name}")

    return ScalarOverride(mode=mode, target=target, alias_name=alias_name)
