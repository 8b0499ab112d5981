"""Unit tests for configuration tree models."""

from datetime import UTC, datetime
from unittest.mock import Mock

import pytest
from ini_monitor.core import IConfigParser
from ini_monitor.models import (
    VOID_SECTION,
    VOID_TREE,
    VOID_VALUE,
    ConfigSection,
    ConfigTree,
    ConfigValue,
    TreeSnapshot,
    clean_token,
    strip_eol_comment,
)
from pydantic import ValidationError


class TestCleanToken:
    """Test cases for name normalization."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Section_1", "section_1"),
            ("  My Key  ", "my_key"),
            ("MIXED case name", "mixed_case_name"),
            ("already_clean", "already_clean"),
            ("", ""),
        ],
    )
    def test_normalization(self, raw, expected):
        """Test lower-casing, trimming and space replacement."""
        assert clean_token(raw) == expected

    @pytest.mark.parametrize("raw", ["  A b C ", "x", "Tab\tInside", " trailing "])
    def test_idempotent(self, raw):
        """Test that normalizing twice changes nothing."""
        assert clean_token(clean_token(raw)) == clean_token(raw)


class TestConfigValue:
    """Test cases for ConfigValue."""

    def test_from_raw_splits_and_trims(self):
        """Test comma splitting with whitespace trimming."""
        value = ConfigValue.from_raw(" Key1 ", " value1 ,value2,  value3 ")

        assert value.name == "key1"
        assert value.values == ("value1", "value2", "value3")

    def test_from_raw_strips_comment(self):
        """Test that an inline comment is removed before splitting."""
        value = ConfigValue.from_raw("key1", "value1, value2   # comment, with comma")

        assert value.values == ("value1", "value2")

    def test_from_raw_empty_value(self):
        """Test that an empty right-hand side yields a single empty scalar."""
        value = ConfigValue.from_raw("key", "")

        assert value.values == ("",)
        assert value.get_val_str(0, "fallback") == "fallback"

    def test_strip_eol_comment(self):
        """Test trailing comment removal."""
        assert strip_eol_comment("abc # def") == "abc"
        assert strip_eol_comment("  abc  ") == "abc"
        assert strip_eol_comment("# only comment") == ""

    def test_is_immutable(self):
        """Test that values cannot be modified after construction."""
        value = ConfigValue.from_raw("key", "a")

        with pytest.raises(ValidationError):
            value.name = "other"

    def test_get_val_str(self):
        """Test string access with offsets and defaults."""
        value = ConfigValue.from_raw("key", "a, b")

        assert value.get_val_str(0, "x") == "a"
        assert value.get_val_str(1, "x") == "b"
        assert value.get_val_str(2, "x") == "x"
        assert value.get_val_str(-1, "x") == "x"

    @pytest.mark.parametrize(
        "raw, expected",
        [("true", True), ("T", True), ("1", True), ("False", False), ("f", False), ("0", False)],
    )
    def test_get_val_bool(self, raw, expected):
        """Test the accepted boolean spellings."""
        value = ConfigValue.from_raw("flag", raw)

        assert value.get_val_bool(0, not expected) is expected

    @pytest.mark.parametrize("raw", ["yes", "no", "tRuE", "2", ""])
    def test_get_val_bool_invalid_returns_default(self, raw):
        """Test that unknown spellings fall back to the default."""
        value = ConfigValue.from_raw("flag", raw)

        assert value.get_val_bool(0, True) is True
        assert value.get_val_bool(0, False) is False

    def test_get_val_int(self):
        """Test integer parsing and fallbacks."""
        value = ConfigValue.from_raw("n", "42, -7, +3, 1.5, 0x10, 1_000, abc")

        assert value.get_val_int(0, 0) == 42
        assert value.get_val_int(1, 0) == -7
        assert value.get_val_int(2, 0) == 3
        assert value.get_val_int(3, 99) == 99
        assert value.get_val_int(4, 99) == 99
        assert value.get_val_int(5, 99) == 99
        assert value.get_val_int(6, 99) == 99
        assert value.get_val_int(7, 99) == 99

    def test_get_val_uint_rejects_negative(self):
        """Test that unsigned access refuses negative numbers."""
        value = ConfigValue.from_raw("n", "5, -5")

        assert value.get_val_uint(0, 1) == 5
        assert value.get_val_uint(1, 1) == 1

    def test_get_val_int_32_bit_range(self):
        """Test that values outside the signed 32-bit range fall back to the default."""
        value = ConfigValue.from_raw("n", "2147483647, -2147483648, 2147483648, -2147483649")

        assert value.get_val_int(0, 0) == 2_147_483_647
        assert value.get_val_int(1, 0) == -2_147_483_648
        assert value.get_val_int(2, 7) == 7
        assert value.get_val_int(3, 7) == 7

    def test_get_val_uint_32_bit_range(self):
        """Test the unsigned 32-bit bounds and the rejected sign prefix."""
        value = ConfigValue.from_raw("n", "4294967295, 4294967296, +5")

        assert value.get_val_uint(0, 1) == 4_294_967_295
        assert value.get_val_uint(1, 1) == 1
        assert value.get_val_uint(2, 1) == 1

    def test_get_val_float(self):
        """Test float parsing and fallbacks."""
        value = ConfigValue.from_raw("f", "1.5, 2, 1e3, nope")

        assert value.get_val_float(0, 0.0) == 1.5
        assert value.get_val_float(1, 0.0) == 2.0
        assert value.get_val_float(2, 0.0) == 1000.0
        assert value.get_val_float(3, -1.0) == -1.0
        assert value.get_val_float(4, -1.0) == -1.0

    def test_string_representation(self):
        """Test the human-readable value line."""
        value = ConfigValue.from_raw("key1", "value1, value2")

        assert str(value) == "[Key: key1 | Val(0): value1 | Val(1): value2]\n"


class TestConfigSection:
    """Test cases for ConfigSection."""

    def test_keys_filled_and_sorted(self):
        """Test that the sorted key list is derived from the values."""
        section = ConfigSection(
            name="main",
            values={
                "zeta": (ConfigValue.from_raw("zeta", "1"),),
                "alpha": (ConfigValue.from_raw("alpha", "2"),),
            },
        )

        assert section.keys == ("alpha", "zeta")

    def test_inconsistent_keys_rejected(self):
        """Test that a key list not matching the values fails validation."""
        with pytest.raises(ValidationError) as exc_info:
            ConfigSection(
                name="main",
                values={"alpha": (ConfigValue.from_raw("alpha", "2"),)},
                keys=("alpha", "beta"),
            )

        assert "keys must be the sorted list of value names" in str(exc_info.value)

    def test_get_first_val_and_get_vals(self):
        """Test lookups with repeated keys and normalized names."""
        first = ConfigValue.from_raw("host", "a")
        second = ConfigValue.from_raw("host", "b")
        section = ConfigSection(name="db", values={"host": (first, second)})

        assert section.get_first_val(" HOST ") is first
        assert section.get_vals("host") == (first, second)

    def test_missing_key_returns_sentinels(self):
        """Test that missing keys never produce None."""
        section = ConfigSection(name="db")

        assert section.get_first_val("missing") is VOID_VALUE
        assert section.get_vals("missing") == ()
        assert section.get_first_val("missing").get_val_str(0, "default") == "default"

    def test_string_representation(self):
        """Test the section dump lists values in sorted key order."""
        section = ConfigSection(
            name="db",
            values={
                "port": (ConfigValue.from_raw("port", "5432"),),
                "host": (ConfigValue.from_raw("host", "localhost"),),
            },
            fingerprint="abc",
        )

        assert str(section) == (
            "Section :: db (abc)\n" "[Key: host | Val(0): localhost]\n" "[Key: port | Val(0): 5432]\n"
        )


class TestTreeSnapshot:
    """Test cases for TreeSnapshot."""

    def test_section_names_filled(self):
        """Test that section names are derived and sorted."""
        snapshot = TreeSnapshot(sections={"b": ConfigSection(name="b"), "a": ConfigSection(name="a")})

        assert snapshot.section_names == ("a", "b")

    def test_inconsistent_section_names_rejected(self):
        """Test that mismatched section names fail validation."""
        with pytest.raises(ValidationError):
            TreeSnapshot(sections={"a": ConfigSection(name="a")}, section_names=("a", "b"))


class TestConfigTree:
    """Test cases for ConfigTree."""

    @pytest.fixture
    def snapshot(self):
        """Create a small parsed snapshot."""
        section = ConfigSection(
            name="section_1",
            values={"key1": (ConfigValue.from_raw("key1", "value1, value2"),)},
            fingerprint="secfp",
        )
        return TreeSnapshot(
            sections={"section_1": section},
            fingerprint="treefp",
            raw="[Section_1]\nkey1 = value1, value2\n",
            mod_time_ns=1_700_000_000_000_000_000,
        )

    @pytest.fixture
    def mock_parser(self, snapshot):
        """Create a parser mock returning the snapshot."""
        parser = Mock(spec=IConfigParser)
        parser.parse_file.return_value = snapshot
        return parser

    def test_name_derived_from_path(self):
        """Test that the tree name is the file stem."""
        tree = ConfigTree("./conf/test.ini")

        assert tree.name == "test"
        assert tree.path == "./conf/test.ini"

    def test_initial_state_is_empty(self):
        """Test a tree before any parse."""
        tree = ConfigTree("test.ini")

        assert tree.sections == {}
        assert tree.section_names == ()
        assert tree.fingerprint == ""
        assert tree.mod_time is None
        assert tree.get_section("anything") is VOID_SECTION

    def test_reparse_swaps_snapshot(self, mock_parser, snapshot):
        """Test that reparse publishes the parser's snapshot."""
        tree = ConfigTree("test.ini", parser=mock_parser)

        assert tree.reparse() is True

        mock_parser.parse_file.assert_called_once_with("test.ini")
        assert tree.snapshot() is snapshot
        assert tree.fingerprint == "treefp"
        assert tree.get_section("Section_1").get_first_val("key1").values == ("value1", "value2")
        assert tree.mod_time == datetime.fromtimestamp(1_700_000_000, UTC)

    def test_reparse_failure_keeps_state(self, mock_parser, snapshot):
        """Test that an unreadable file leaves the previous state in place."""
        tree = ConfigTree("test.ini", parser=mock_parser)
        tree.reparse()

        mock_parser.parse_file.return_value = None

        assert tree.reparse() is False
        assert tree.snapshot() is snapshot

    def test_reparse_without_parser(self):
        """Test that a tree without a parser cannot reparse."""
        assert VOID_TREE.reparse() is False
        assert VOID_TREE.fingerprint == ""
        assert VOID_TREE.get_section("x") is VOID_SECTION

    def test_string_dumps(self, mock_parser):
        """Test the structured and raw dumps."""
        tree = ConfigTree("test.ini", parser=mock_parser)
        tree.reparse()

        structured = str(tree)
        raw = tree.raw_string()

        assert structured.startswith("Config: test (treefp)\nLastWriteTime: 2023-11-14T22:13:20+00:00\n")
        assert "Section :: section_1 (secfp)\n" in structured
        assert "[Key: key1 | Val(0): value1 | Val(1): value2]\n" in structured

        assert raw.startswith("Config: test (treefp)\n")
        assert raw.endswith("=" * 68 + "\n\n[Section_1]\nkey1 = value1, value2\n")

    def test_dump_before_parse(self):
        """Test the header of a tree that was never read."""
        tree = ConfigTree("missing.ini")

        assert str(tree) == "Config: missing ()\nLastWriteTime: never\n"

    def test_sentinels_carry_no_data(self):
        """Test the void sentinels."""
        assert VOID_VALUE.values == ()
        assert VOID_SECTION.values == {}
        assert VOID_SECTION.fingerprint == ""
        assert VOID_TREE.sections == {}
