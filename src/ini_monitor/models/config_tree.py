"""
Data models for parsed INI configuration trees.

A configuration tree holds named sections, each section holds named value
lists, and each value holds the comma-split scalars of one ``key = value``
line. Missing lookups resolve to the ``VOID_*`` sentinels so callers never
have to check for None.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from ini_monitor.core.interfaces import IConfigParser

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_PATTERN = re.compile(r"^[+-]?[0-9]+$")
_UINT_PATTERN = re.compile(r"^[0-9]+$")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_UINT32_MAX = 2**32 - 1


def clean_token(token: str) -> str:
    """
    Normalize a section name or key.

    Lower-cases, trims framing whitespace and turns interior spaces into
    underscores, so ``" My Key "`` and ``"my_key"`` address the same entry.
    """
    return token.strip().lower().replace(" ", "_")


def strip_eol_comment(value: str) -> str:
    """Drop everything from the first ``#`` onward and trim the rest."""
    idx = value.find("#")
    if idx < 0:
        return value.strip()
    return value[:idx].strip()


class ConfigValue(BaseModel):
    """
    A single ``key = value`` entry within a section.

    The same key may appear several times in a section; each occurrence is
    its own ConfigValue. Accessors are total: a bad offset or a failed
    conversion returns the caller's default.
    """

    name: str = Field(..., description="Normalized key name")
    values: tuple[str, ...] = Field(default=(), description="Comma-split, trimmed scalars")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_raw(cls, key: str, raw_value: str) -> ConfigValue:
        """Build a value from the raw right-hand side of a key/value line."""
        parts = strip_eol_comment(raw_value).split(",")
        return cls(name=clean_token(key), values=tuple(part.strip() for part in parts))

    def _raw_at(self, offset: int) -> str | None:
        if offset < 0 or offset >= len(self.values):
            return None
        return self.values[offset]

    def get_val_str(self, offset: int, default: str) -> str:
        raw = self._raw_at(offset)
        if not raw:
            return default
        return raw

    def get_val_bool(self, offset: int, default: bool) -> bool:
        raw = self._raw_at(offset)
        if raw in _TRUE_STRINGS:
            return True
        if raw in _FALSE_STRINGS:
            return False
        return default

    def get_val_int(self, offset: int, default: int) -> int:
        """Parse a signed 32-bit base-10 integer."""
        raw = self._raw_at(offset)
        if raw is None or not _INT_PATTERN.match(raw):
            return default
        number = int(raw)
        if not _INT32_MIN <= number <= _INT32_MAX:
            return default
        return number

    def get_val_uint(self, offset: int, default: int) -> int:
        """Like get_val_int, but unsigned: a sign prefix or a value above 2**32 - 1 falls back to the default."""
        raw = self._raw_at(offset)
        if raw is None or not _UINT_PATTERN.match(raw):
            return default
        number = int(raw)
        if number > _UINT32_MAX:
            return default
        return number

    def get_val_float(self, offset: int, default: float) -> float:
        raw = self._raw_at(offset)
        if raw is None or "_" in raw:
            return default
        try:
            return float(raw)
        except ValueError:
            return default

    def __str__(self) -> str:
        parts = [f"[Key: {self.name}"]
        parts.extend(f" | Val({i}): {val}" for i, val in enumerate(self.values))
        parts.append("]\n")
        return "".join(parts)


class ConfigSection(BaseModel):
    """
    A named section and its key/value entries.

    Same-named sections in one file are coalesced into a single instance
    whose value lists keep file order. ``keys`` is the sorted list of
    ``values`` keys and is filled in automatically when omitted.
    """

    name: str = Field(..., description="Normalized section name")
    values: dict[str, tuple[ConfigValue, ...]] = Field(default_factory=dict)
    keys: tuple[str, ...] = Field(default=())
    fingerprint: str = Field(default="", description="SHA-1 over the section's keys and values")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def fill_sorted_keys(cls, data):
        if isinstance(data, dict) and "keys" not in data:
            data = {**data, "keys": tuple(sorted(data.get("values") or {}))}
        return data

    @model_validator(mode="after")
    def validate_sorted_keys(self):
        """Ensure the sorted key list matches the value mapping exactly."""
        if list(self.keys) != sorted(self.values):
            raise ValueError("keys must be the sorted list of value names")
        return self

    def get_vals(self, name: str) -> tuple[ConfigValue, ...]:
        """All values stored under ``name``, in parse order."""
        return self.values.get(clean_token(name), ())

    def get_first_val(self, name: str) -> ConfigValue:
        vals = self.get_vals(name)
        if not vals:
            return VOID_VALUE
        return vals[0]

    def __str__(self) -> str:
        lines = [f"Section :: {self.name} ({self.fingerprint})\n"]
        for key in self.keys:
            lines.extend(str(val) for val in self.values[key])
        return "".join(lines)


class TreeSnapshot(BaseModel):
    """
    One fully built, fingerprinted parse result.

    A ConfigTree exposes exactly one snapshot at a time and replaces it
    wholesale on reparse.
    """

    sections: dict[str, ConfigSection] = Field(default_factory=dict)
    section_names: tuple[str, ...] = Field(default=())
    fingerprint: str = ""
    raw: str = ""
    mod_time_ns: int | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def fill_section_names(cls, data):
        if isinstance(data, dict) and "section_names" not in data:
            data = {**data, "section_names": tuple(sorted(data.get("sections") or {}))}
        return data

    @model_validator(mode="after")
    def validate_section_names(self):
        if list(self.section_names) != sorted(self.sections):
            raise ValueError("section_names must be the sorted list of section names")
        return self


EMPTY_SNAPSHOT = TreeSnapshot()


def _ns_to_datetime(mod_time_ns: int | None) -> datetime | None:
    if mod_time_ns is None:
        return None
    return datetime.fromtimestamp(mod_time_ns / 1_000_000_000, UTC)


class ConfigTree:
    """
    In-memory view of one configuration file.

    State lives in an immutable TreeSnapshot that ``reparse`` replaces with
    a single reference assignment, so concurrent readers see either the old
    or the new tree, never a half-built one. Use ``snapshot()`` to read
    several attributes from the same parse.
    """

    def __init__(self, path: str | Path, parser: IConfigParser | None = None, name: str | None = None):
        self.path = str(path)
        self.name = name if name is not None else Path(self.path).stem
        self._parser = parser
        self._state: TreeSnapshot = EMPTY_SNAPSHOT

    def snapshot(self) -> TreeSnapshot:
        return self._state

    @property
    def sections(self) -> Mapping[str, ConfigSection]:
        return self._state.sections

    @property
    def section_names(self) -> tuple[str, ...]:
        return self._state.section_names

    @property
    def fingerprint(self) -> str:
        return self._state.fingerprint

    @property
    def raw(self) -> str:
        return self._state.raw

    @property
    def mod_time_ns(self) -> int | None:
        return self._state.mod_time_ns

    @property
    def mod_time(self) -> datetime | None:
        """Last observed modification time of the source file, in UTC."""
        return _ns_to_datetime(self._state.mod_time_ns)

    def get_section(self, name: str) -> ConfigSection:
        return self._state.sections.get(clean_token(name), VOID_SECTION)

    def reparse(self) -> bool:
        """
        Re-read the source file and swap in the freshly parsed state.

        Returns:
            True if the file was read and the new state is visible, False if
            the file could not be read (the previous state is kept)
        """
        if self._parser is None:
            return False

        snapshot = self._parser.parse_file(self.path)
        if snapshot is None:
            logger.debug("Keeping previous state for %s; file could not be read", self.path)
            return False

        self._state = snapshot
        logger.debug("Reparsed %s (fingerprint %s)", self.path, snapshot.fingerprint)
        return True

    def _header(self, state: TreeSnapshot) -> str:
        mod_time = _ns_to_datetime(state.mod_time_ns)
        mod_time_text = mod_time.isoformat() if mod_time else "never"
        return f"Config: {self.name} ({state.fingerprint})\nLastWriteTime: {mod_time_text}\n"

    def raw_string(self) -> str:
        """The header followed by the file exactly as read from disk."""
        state = self._state
        return f"{self._header(state)}{'=' * 68}\n\n{state.raw}"

    def __str__(self) -> str:
        state = self._state
        body = "".join(str(state.sections[name]) for name in state.section_names)
        return f"{self._header(state)}{body}"

    def __repr__(self) -> str:
        return f"ConfigTree(name={self.name!r}, path={self.path!r}, fingerprint={self.fingerprint!r})"


VOID_VALUE = ConfigValue(name="void")
VOID_SECTION = ConfigSection(name="void")
VOID_TREE = ConfigTree(path="", name="void")
