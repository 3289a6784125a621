"""
bb_stdlib.util errors

Minimal error taxonomy for the collection primitives.

Not-found is never an error: lookups return a sentinel instead.
"""

from __future__ import annotations


class StdlibError(Exception):
    """Base class for bb_stdlib failures."""


class ConstructionError(StdlibError, ValueError):
    """Raised when bulk-construction input violates the key/value pair shape."""


class CanonicalizationError(StdlibError, ValueError):
    """Raised when a value cannot be canonicalized deterministically."""
