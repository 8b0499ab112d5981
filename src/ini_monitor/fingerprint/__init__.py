"""Deterministic content fingerprints for configuration trees."""

from .engine import FingerprintEngine

__all__ = [
    "FingerprintEngine",
]
