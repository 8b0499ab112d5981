"""
Parsers package for INI configuration files.

Turns raw ``[section]`` / ``key = value`` text into fingerprinted
tree snapshots consumed by ConfigTree and the change monitor.
"""

from .ini_parser import IniParser, load_config

__all__ = [
    "IniParser",
    "load_config",
]
