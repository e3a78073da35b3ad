"""Completion markers keyed by build fingerprints."""

from .keys import BuildFingerprintInput, fingerprint
from .store import CompletionStore

__all__ = ["BuildFingerprintInput", "CompletionStore", "fingerprint"]
