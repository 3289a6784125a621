"""bb_stdlib.util.canonical

Deterministic JSON canonicalization + SHA-256 helpers used to index map keys.

Rules:
- JSON serialization is canonical: sorted keys, compact separators, UTF-8, no NaN/Infinity.
- Hashing is SHA-256 over UTF-8 bytes of canonical JSON strings.
- A bucket is the first 64 bits of that digest; equal buckets do not imply equal keys.
- Errors are strict and deterministic.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from .errors import CanonicalizationError

BUCKET_HEX_DIGITS = 16


def canonical_dumps(obj: Any) -> str:
    """Return a canonical JSON string for obj.

    Canonical form:
    - sort_keys=True
    - separators=(',', ':') (no extra whitespace)
    - ensure_ascii=False (preserve unicode)
    - allow_nan=False (reject NaN/Infinity deterministically)
    """
    try:
        return json.dumps(
            obj,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise CanonicalizationError(f"canonical_dumps: non-serializable input: {e}") from None


def sha256_hex(text: str) -> str:
    """Return SHA-256 hex digest of UTF-8 encoded text."""
    if not isinstance(text, str):
        raise TypeError("sha256_hex: text must be str")
    # surrogatepass: lone surrogates are legal in str keys
    return hashlib.sha256(text.encode("utf-8", "surrogatepass")).hexdigest()


def bucket_of(canonical: str) -> int:
    """Map a canonical string to its integer hash bucket."""
    return int(sha256_hex(canonical)[:BUCKET_HEX_DIGITS], 16)


__all__ = [
    "BUCKET_HEX_DIGITS",
    "canonical_dumps",
    "sha256_hex",
    "bucket_of",
]
