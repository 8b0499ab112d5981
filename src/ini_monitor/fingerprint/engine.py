"""
Content fingerprints for parsed configuration trees.

Fingerprints are computed bottom-up over normalized content only:

1. A section hashes ``"<key>:<value>"`` for every key in sorted order and
   every value of that key in parse order.
2. A tree hashes ``"<section>:<section fingerprint>"`` for every section
   in sorted order.

Sorting makes the result independent of where sections and keys sit in the
file, while repeated keys still contribute in the order they were declared.
Whitespace, comments and blank lines never reach the hash.
"""

import hashlib
import logging
from collections.abc import Iterable, Mapping

from ini_monitor.core.interfaces import IFingerprintEngine
from ini_monitor.models import ConfigSection

logger = logging.getLogger(__name__)


class FingerprintEngine(IFingerprintEngine):
    """SHA-1 based fingerprint engine; used for change detection, not security."""

    def section_fingerprint(self, section: ConfigSection) -> str:
        hash_obj = hashlib.sha1()
        for key in section.keys:
            for value in section.values[key]:
                hash_obj.update(f"{key}:{value}".encode("utf-8"))
        return hash_obj.hexdigest()

    def tree_fingerprint(self, sections: Mapping[str, ConfigSection], section_names: Iterable[str]) -> str:
        hash_obj = hashlib.sha1()
        for name in section_names:
            hash_obj.update(f"{name}:{sections[name].fingerprint}".encode("utf-8"))
        return hash_obj.hexdigest()

    def fingerprint_sections(self, sections: Mapping[str, ConfigSection]) -> dict[str, ConfigSection]:
        """
        Return copies of the given sections with their fingerprints set.

        Must only be called once every section of the tree is fully built.
        """
        fingerprinted = {
            name: section.model_copy(update={"fingerprint": self.section_fingerprint(section)})
            for name, section in sections.items()
        }
        logger.debug("Fingerprinted %d sections", len(fingerprinted))
        return fingerprinted
