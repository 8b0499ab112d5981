"""
INI configuration file parser.

Reads ``[section]`` headers and ``key = value`` lines into ConfigSection
objects, coalescing repeated sections, and hands the finished sections to
the fingerprint engine before producing an immutable TreeSnapshot.
"""

import logging
import re
from pathlib import Path

from ini_monitor.config import MonitorConfig, get_config
from ini_monitor.core.interfaces import IConfigParser
from ini_monitor.fingerprint import FingerprintEngine
from ini_monitor.models import ConfigSection, ConfigTree, ConfigValue, TreeSnapshot, clean_token

logger = logging.getLogger(__name__)

SECTION_PATTERN = re.compile(r"^\s*\[(.*)\]\s*$")
KEYVAL_PATTERN = re.compile(r"^\s*(.*?)\s*=\s*(.*?)\s*$")
COMMENT_PREFIXES = ("#", ";")


class IniParser(IConfigParser):
    """
    Parser for line-oriented INI files.

    Parsing never raises for bad input: lines before the first section and
    lines that are not key/value pairs are skipped, and unreadable files
    yield None so callers can keep whatever state they already had.
    """

    def __init__(self, config: MonitorConfig | None = None, fingerprint_engine: FingerprintEngine | None = None):
        """Initialize the parser with configuration and a fingerprint engine."""
        self.config = config or get_config()
        self.fingerprint_engine = fingerprint_engine or FingerprintEngine()

    def parse_file(self, file_path: str | Path) -> TreeSnapshot | None:
        """
        Parse an INI file from disk.

        Args:
            file_path: Path to the INI file

        Returns:
            Snapshot with sections, fingerprints, raw text and modification
            time, or None if the file could not be stat'ed or read
        """
        file_path = Path(file_path)
        try:
            mod_time_ns = file_path.stat().st_mtime_ns
            text = file_path.read_text(encoding=self.config.file_encoding, errors="replace")
        except OSError as e:
            logger.debug("Could not read %s: %s", file_path, e)
            return None

        snapshot = self.parse_string(text, mod_time_ns=mod_time_ns)
        logger.debug("Parsed %s: %d sections", file_path, len(snapshot.sections))
        return snapshot

    def parse_string(self, text: str, mod_time_ns: int | None = None) -> TreeSnapshot:
        """
        Parse INI text that is already in memory.

        Args:
            text: Raw INI text
            mod_time_ns: Modification time to record on the snapshot

        Returns:
            Fully fingerprinted snapshot
        """
        collected = self._collect_values(text)

        sections = {
            name: ConfigSection(name=name, values={key: tuple(vals) for key, vals in values.items()})
            for name, values in collected.items()
        }
        sections = self.fingerprint_engine.fingerprint_sections(sections)
        section_names = sorted(sections)

        return TreeSnapshot(
            sections=sections,
            section_names=tuple(section_names),
            fingerprint=self.fingerprint_engine.tree_fingerprint(sections, section_names),
            raw=text,
            mod_time_ns=mod_time_ns,
        )

    def _collect_values(self, text: str) -> dict[str, dict[str, list[ConfigValue]]]:
        """
        Group values by normalized section and key, in file order.

        Args:
            text: Raw INI text

        Returns:
            Mapping of section name to a mapping of key to parsed values
        """
        collected: dict[str, dict[str, list[ConfigValue]]] = {}
        current: dict[str, list[ConfigValue]] | None = None

        # only "\n" ends a line; form feeds and other separators stay inside values
        for line in text.split("\n"):
            line = line.strip()
            if not line or line.startswith(COMMENT_PREFIXES):
                continue

            section_match = SECTION_PATTERN.match(line)
            if section_match:
                current = collected.setdefault(clean_token(section_match.group(1)), {})
                continue

            # orphaned
            if current is None:
                continue

            keyval_match = KEYVAL_PATTERN.match(line)
            if not keyval_match:
                continue

            value = ConfigValue.from_raw(keyval_match.group(1), keyval_match.group(2))
            current.setdefault(value.name, []).append(value)

        return collected


def load_config(file_path: str | Path, parser: IConfigParser | None = None) -> ConfigTree:
    """
    Create a ConfigTree for a file and parse it.

    A missing or unreadable file produces an empty tree rather than an
    error; the monitor fills it in once the file becomes readable.

    Args:
        file_path: Path to the INI file
        parser: Parser to use for this and all later reparses

    Returns:
        The parsed tree
    """
    tree = ConfigTree(file_path, parser=parser or IniParser())
    tree.reparse()
    return tree
