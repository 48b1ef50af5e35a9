"""
Unit tests for the mapping table.

Tests cover:
- Primitive lookup and missing entries
- The scalar override slot in inline and alias mode
- Building tables from configuration
"""

import pytest

from typemirror.core.config import ConfigError, GeneratorConfig
from typemirror.core.errors import UnmappedPrimitive
from typemirror.core.mapping import (
    MappingTable,
    OverrideMode,
    ScalarOverride,
    parse_kind,
    parse_override,
)
from typemirror.core.types import PrimitiveKind
from typemirror.languages.typescript.config import TYPESCRIPT_PRIMITIVES


@pytest.fixture
def table():
    return MappingTable(TYPESCRIPT_PRIMITIVES)


class TestLookup:
    """Tests for MappingTable.lookup()."""

    def test_primitive_lookup(self, table):
        assert table.lookup(PrimitiveKind.INTEGER).syntax == "number"
        assert table.lookup(PrimitiveKind.TIMESTAMP).syntax == "string"
        assert not table.lookup(PrimitiveKind.STRING).is_alias

    def test_missing_kind_raises(self, table):
        with pytest.raises(UnmappedPrimitive) as excinfo:
            table.without(PrimitiveKind.TIMESTAMP).lookup(PrimitiveKind.TIMESTAMP, "Person.created_at")

        assert excinfo.value.kind == "timestamp"
        assert "Person.created_at" in str(excinfo.value)

    def test_inline_override(self, table):
        override = ScalarOverride(OverrideMode.INLINE, "Date")
        result = table.with_override(PrimitiveKind.TIMESTAMP, override).lookup(PrimitiveKind.TIMESTAMP)
        assert result.syntax == "Date"
        assert result.alias_name is None

    def test_alias_override(self, table):
        override = ScalarOverride(OverrideMode.ALIAS, "string", "Timestamp")
        result = table.with_override(PrimitiveKind.TIMESTAMP, override).lookup(PrimitiveKind.TIMESTAMP)
        assert result.is_alias
        assert result.alias_name == "Timestamp"
        assert result.syntax == "string"

    def test_alias_name_defaults_to_kind(self, table):
        override = ScalarOverride(OverrideMode.ALIAS, "string")
        result = table.with_override(PrimitiveKind.BYTE, override).lookup(PrimitiveKind.BYTE)
        assert result.alias_name == "Byte"

    def test_override_covers_missing_primitive(self, table):
        stripped = table.without(PrimitiveKind.TIMESTAMP)
        override = ScalarOverride(OverrideMode.INLINE, "string")
        result = stripped.with_override(PrimitiveKind.TIMESTAMP, override).lookup(PrimitiveKind.TIMESTAMP)
        assert result.syntax == "string"

    def test_tables_are_not_mutated(self, table):
        table.with_primitive(PrimitiveKind.INTEGER, "bigint")
        table.with_override(PrimitiveKind.TIMESTAMP, ScalarOverride(OverrideMode.INLINE, "Date"))
        assert table.lookup(PrimitiveKind.INTEGER).syntax == "number"
        assert table.overrides == {}


class TestFromConfig:
    """Tests for MappingTable.from_config() and its parsers."""

    def test_bare_mode_uses_default_target(self):
        config = GeneratorConfig(scalar_overrides={"timestamp": "alias"})
        table = MappingTable.from_config(config, TYPESCRIPT_PRIMITIVES)
        result = table.lookup(PrimitiveKind.TIMESTAMP)
        assert result.syntax == "string"
        assert result.alias_name == "Timestamp"

    def test_full_entry(self):
        config = GeneratorConfig(
            scalar_overrides={"timestamp": {"mode": "alias", "target": "Date", "alias": "When"}}
        )
        table = MappingTable.from_config(config, TYPESCRIPT_PRIMITIVES)
        assert table.overrides[PrimitiveKind.TIMESTAMP] == ScalarOverride(OverrideMode.ALIAS, "Date", "When")

    def test_unknown_kind_raises(self):
        with pytest.raises(ConfigError, match="Unknown primitive kind"):
            parse_kind("datetime")

    def test_invalid_mode_raises(self):
        with pytest.raises(ConfigError, match="Invalid override mode"):
            parse_override(PrimitiveKind.TIMESTAMP, {"mode": "weird"}, "string")

    def test_invalid_alias_raises(self):
        with pytest.raises(ConfigError, match="Invalid alias name"):
            parse_override(PrimitiveKind.TIMESTAMP, {"mode": "alias", "alias": "not valid"}, "string")

    def test_missing_target_raises(self):
        with pytest.raises(ConfigError, match="no target"):
            parse_override(PrimitiveKind.TIMESTAMP, "inline", None)

    def test_wrong_entry_type_raises(self):
        with pytest.raises(ConfigError):
            parse_override(PrimitiveKind.TIMESTAMP, 42, "string")
