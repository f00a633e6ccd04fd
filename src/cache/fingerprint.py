# src/cache/fingerprint.py — v1
"""Content identity for summary cache invalidation."""

from __future__ import annotations

import hashlib


def hash_content(content: str) -> str:
    """SHA-256 hex digest of the exact UTF-8 section content.

    No normalization is applied: a single changed character yields a new
    hash and therefore a fresh summary.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
