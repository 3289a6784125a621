"""bb_stdlib.util.keys

Key classification and descriptors for HashMap.

Every value is a valid key. A key is classified into a closed set of kinds
through a type dispatch table (walking the MRO, so builtin subclasses
resolve to their base's kind):

- scalar:    None, bool, int, float, complex, Decimal, Fraction, str, bytes
             value equality with array-key coercion:
             True -> 1, 2.0 -> 2, "42" -> 42 (canonical decimal integers only)
- composite: list, tuple, dict, set, frozenset
             canonical serialization of contents, deep value equality
- reference: everything else
             identity; equal-content instances are distinct keys

A KeyDescriptor is (kind, bucket, canonical). Two keys are the same key iff
their descriptors are equal. The bucket is only an index hint.

Identity tokens are id()-derived. They stay unique while the instance is
alive, which a map guarantees by holding its keys.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Set
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any, Callable, Dict, List, Optional

from .canonical import bucket_of, canonical_dumps

logger = logging.getLogger(__name__)


class KeyKind(str, Enum):
    SCALAR = "scalar"
    COMPOSITE = "composite"
    REFERENCE = "reference"


@dataclass(frozen=True)
class KeyDescriptor:
    kind: KeyKind
    bucket: int = field(compare=False)
    canonical: str


DEFAULT_KINDS: Dict[type, KeyKind] = {
    type(None): KeyKind.SCALAR,
    bool: KeyKind.SCALAR,
    int: KeyKind.SCALAR,
    float: KeyKind.SCALAR,
    complex: KeyKind.SCALAR,
    Decimal: KeyKind.SCALAR,
    Fraction: KeyKind.SCALAR,
    str: KeyKind.SCALAR,
    bytes: KeyKind.SCALAR,
    list: KeyKind.COMPOSITE,
    tuple: KeyKind.COMPOSITE,
    dict: KeyKind.COMPOSITE,
    set: KeyKind.COMPOSITE,
    frozenset: KeyKind.COMPOSITE,
    object: KeyKind.REFERENCE,
}

# "0", "7", "-12"; not "007", "-0", "+1", " 1", "1.0"
_INT_STRING = re.compile(r"0|-?[1-9][0-9]*", re.ASCII)

Node = List[Any]


def identity_token(obj: Any) -> str:
    """Stable per-instance token for obj (unique while obj is alive)."""
    tp = type(obj)
    return f"{tp.__module__}.{tp.__qualname__}@{id(obj):x}"


def _int_text(n: int) -> str:
    # hex has no int<->str digit limit
    return format(n, "x")


def _encode_number(value: Any) -> Node:
    # exact rational normal form: 0.5 == Fraction(1, 2) == Decimal("0.5")
    if isinstance(value, float) and not math.isfinite(value):
        return ["f", repr(value)]
    if isinstance(value, Decimal) and not value.is_finite():
        return ["f", "nan" if value.is_nan() else repr(float(value))]
    q = Fraction(value)
    if q.denominator == 1:
        return ["i", _int_text(q.numerator)]
    return ["q", f"{_int_text(q.numerator)}/{_int_text(q.denominator)}"]


class KeyStrategy:
    """Container-local hashing and equality policy.

    numeric_string_keys: coerce canonical decimal integer strings to ints
    kinds:               extra dispatch-table rows, merged over DEFAULT_KINDS
    """

    def __init__(
        self,
        *,
        numeric_string_keys: bool = True,
        kinds: Optional[Mapping[type, KeyKind]] = None,
    ) -> None:
        self.numeric_string_keys = numeric_string_keys
        self._kinds: Dict[type, KeyKind] = dict(DEFAULT_KINDS)
        self._kind_cache: Dict[type, KeyKind] = {}
        self._encoders: Dict[KeyKind, Callable[[Any, List[int]], Node]] = {
            KeyKind.SCALAR: self._encode_scalar,
            KeyKind.COMPOSITE: self._encode_composite,
            KeyKind.REFERENCE: self._encode_reference,
        }
        if kinds:
            for tp, kind in kinds.items():
                self.register(tp, kind)

    def register(self, tp: type, kind: KeyKind) -> None:
        """Add or override the dispatch-table row for tp (and its subclasses)."""
        if not isinstance(tp, type):
            raise TypeError("register: tp must be a type")
        kind = KeyKind(kind)
        self._kinds[tp] = kind
        self._kind_cache.clear()
        logger.debug("key kind registered: %s.%s -> %s", tp.__module__, tp.__qualname__, kind.value)

    def classify(self, value: Any) -> KeyKind:
        tp = type(value)
        kind = self._kind_cache.get(tp)
        if kind is None:
            # object is always in the MRO, so this terminates
            kind = next(self._kinds[base] for base in tp.__mro__ if base in self._kinds)
            self._kind_cache[tp] = kind
        return kind

    def describe(self, key: Any) -> KeyDescriptor:
        kind = self.classify(key)
        canonical = canonical_dumps(self._encoders[kind](key, []))
        return KeyDescriptor(kind=kind, bucket=bucket_of(canonical), canonical=canonical)

    def equivalent(self, a: Any, b: Any) -> bool:
        """Key equality rule applied to arbitrary values."""
        if a is b:
            return True
        return self.describe(a) == self.describe(b)

    def _encode(self, value: Any, stack: List[int]) -> Node:
        return self._encoders[self.classify(value)](value, stack)

    def _encode_scalar(self, value: Any, stack: List[int]) -> Node:
        if value is None:
            return ["n"]
        if isinstance(value, (bool, int, float, Decimal, Fraction)):
            return _encode_number(value)
        if isinstance(value, complex):
            if value.imag == 0:
                return _encode_number(value.real)
            return ["c", _encode_number(value.real), _encode_number(value.imag)]
        if isinstance(value, (bytes, bytearray)):
            return ["y", bytes(value).hex()]
        # str, or a registered scalar type keyed by its text form
        text = value if isinstance(value, str) else str(value)
        if self.numeric_string_keys and _INT_STRING.fullmatch(text):
            # Decimal parses without the int(str) digit limit
            return ["i", _int_text(int(Decimal(text)))]
        return ["s", text]

    def _encode_composite(self, value: Any, stack: List[int]) -> Node:
        marker = id(value)
        if marker in stack:
            return ["cycle", len(stack) - stack.index(marker)]
        stack.append(marker)
        try:
            if isinstance(value, Mapping):
                items = [[self._encode(k, stack), self._encode(v, stack)] for k, v in value.items()]
                items.sort(key=canonical_dumps)
                return ["d", items]
            if isinstance(value, Set):
                members = [self._encode(m, stack) for m in value]
                members.sort(key=canonical_dumps)
                return ["u", members]
            tag = "t" if isinstance(value, tuple) else "l"
            return [tag, [self._encode(item, stack) for item in value]]
        finally:
            stack.pop()

    def _encode_reference(self, value: Any, stack: List[int]) -> Node:
        return ["r", identity_token(value)]


__all__ = [
    "DEFAULT_KINDS",
    "KeyDescriptor",
    "KeyKind",
    "KeyStrategy",
    "identity_token",
]
