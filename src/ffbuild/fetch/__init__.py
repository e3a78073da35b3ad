"""Source retrieval: archive cache, extraction, and git checkouts."""

from .archive import extract
from .git import GitCheckout, checkout_latest
from .http import SourceCache, file_sha256

__all__ = ["GitCheckout", "SourceCache", "checkout_latest", "extract", "file_sha256"]
