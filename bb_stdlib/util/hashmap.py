"""bb_stdlib.util.hashmap

Insertion-ordered, hash-indexed key/value container.

Contracts:
- Any value is a valid key; key identity follows the map's KeyStrategy
  (value equality for scalars and composites, identity for references).
- Iteration order is insertion order until sort() reorders it.
  Overwriting a key keeps its position.
- get() never raises; a missing key yields the default (None).
- The manual cursor (rewind/current/key/next) and implicit iteration are
  independent: a for-loop never moves the manual cursor.
- Not thread-safe. Callers serialize access.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .errors import ConstructionError
from .keys import KeyDescriptor, KeyStrategy

logger = logging.getLogger(__name__)

Comparator = Callable[[Any, Any], int]


@dataclass(eq=False)
class _Entry:
    descriptor: KeyDescriptor
    key: Any
    value: Any
    # set once the entry leaves the map; live iterators skip it
    removed: bool = False


def _natural_order(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


class HashMap:
    def __init__(self, strategy: Optional[KeyStrategy] = None) -> None:
        self._strategy = strategy if strategy is not None else KeyStrategy()
        self._entries: List[_Entry] = []
        self._buckets: Dict[int, List[_Entry]] = {}
        self._cursor = 0

    @property
    def strategy(self) -> KeyStrategy:
        return self._strategy

    @classmethod
    def create_from_array(
        cls,
        ordered_kvs: Union[Mapping, "HashMap", Iterable[Tuple[Any, Any]]],
        strategy: Optional[KeyStrategy] = None,
    ) -> "HashMap":
        """Build a map from a mapping or an iterable of (key, value) pairs.

        Pairs are put in order, so a later duplicate key overwrites the
        earlier value in the earlier position.
        """
        out = cls(strategy)
        if isinstance(ordered_kvs, (Mapping, HashMap)):
            pairs: Iterable[Any] = ordered_kvs.items()
        elif isinstance(ordered_kvs, (str, bytes)) or not isinstance(ordered_kvs, Iterable):
            raise ConstructionError(
                f"create_from_array: expected mapping or iterable of pairs, got {type(ordered_kvs).__name__}"
            )
        else:
            pairs = ordered_kvs

        for idx, pair in enumerate(pairs):
            if isinstance(pair, (str, bytes)):
                raise ConstructionError(f"create_from_array: element {idx} is not a (key, value) pair")
            try:
                key, value = pair
            except (TypeError, ValueError):
                raise ConstructionError(f"create_from_array: element {idx} is not a (key, value) pair") from None
            out.put(key, value)

        logger.debug("hashmap built from array: %d entries", len(out._entries))
        return out

    def _find(self, descriptor: KeyDescriptor) -> Optional[_Entry]:
        for entry in self._buckets.get(descriptor.bucket, ()):
            if entry.descriptor == descriptor:
                return entry
        return None

    def _link(self, entry: _Entry) -> None:
        self._entries.append(entry)
        self._buckets.setdefault(entry.descriptor.bucket, []).append(entry)

    def put(self, key: Any, value: Any) -> "HashMap":
        descriptor = self._strategy.describe(key)
        entry = self._find(descriptor)
        if entry is None:
            self._link(_Entry(descriptor=descriptor, key=key, value=value))
        else:
            entry.value = value
        return self

    def put_all(self, other: Union[Mapping, "HashMap"]) -> "HashMap":
        for key, value in other.items():
            self.put(key, value)
        return self

    def get(self, key: Any, default: Any = None) -> Any:
        entry = self._find(self._strategy.describe(key))
        return default if entry is None else entry.value

    def contains_key(self, key: Any) -> bool:
        return self._find(self._strategy.describe(key)) is not None

    def contains_value(self, value: Any) -> bool:
        """Linear scan, O(n), using the key equality rule on values."""
        target = self._strategy.describe(value)
        for entry in self._entries:
            if entry.value is value or self._strategy.describe(entry.value) == target:
                return True
        return False

    def remove(self, key: Any) -> bool:
        entry = self._find(self._strategy.describe(key))
        if entry is None:
            return False

        chain = self._buckets[entry.descriptor.bucket]
        chain.remove(entry)
        if not chain:
            del self._buckets[entry.descriptor.bucket]

        pos = self._entries.index(entry)
        del self._entries[pos]
        entry.removed = True
        # cursor stays on the entry that followed the removed one
        if pos < self._cursor:
            self._cursor -= 1
        return True

    def clear(self) -> None:
        for entry in self._entries:
            entry.removed = True
        self._entries = []
        self._buckets = {}
        self._cursor = 0
        logger.debug("hashmap cleared")

    def size(self) -> int:
        return len(self._entries)

    def is_empty(self) -> bool:
        return not self._entries

    def keys(self) -> List[Any]:
        return [e.key for e in self._entries]

    def values(self) -> List[Any]:
        return [e.value for e in self._entries]

    def items(self) -> List[Tuple[Any, Any]]:
        return [(e.key, e.value) for e in self._entries]

    def sort(self, comparator: Optional[Comparator] = None, by_key: bool = False) -> None:
        """Stable in-place sort by value, or by key when by_key is set.

        comparator(a, b) returns <0, 0 or >0; None means natural ordering.
        The cursor is rewound afterwards.
        """
        sort_key = cmp_to_key(comparator or _natural_order)
        if by_key:
            self._entries.sort(key=lambda e: sort_key(e.key))
        else:
            self._entries.sort(key=lambda e: sort_key(e.value))
        self._cursor = 0
        logger.debug("hashmap sorted by %s: %d entries", "key" if by_key else "value", len(self._entries))

    # Manual cursor

    def rewind(self) -> None:
        self._cursor = 0

    def valid(self) -> bool:
        return self._cursor < len(self._entries)

    def current(self) -> Any:
        """Value under the cursor, or False past the end."""
        if self.valid():
            return self._entries[self._cursor].value
        return False

    def key(self) -> Any:
        """Key under the cursor, or None past the end."""
        if self.valid():
            return self._entries[self._cursor].key
        return None

    def next(self) -> None:
        if self.valid():
            self._cursor += 1

    # Copying

    def clone(self) -> "HashMap":
        """Copy entry list and index; keys and values are shared."""
        out = self.__class__(self._strategy)
        for entry in self._entries:
            out._link(_Entry(descriptor=entry.descriptor, key=entry.key, value=entry.value))
        out._cursor = self._cursor
        return out

    __copy__ = clone

    # Container protocol

    def __iter__(self) -> Iterator[Any]:
        # own position over a snapshot; entries removed meanwhile are skipped
        for entry in list(self._entries):
            if not entry.removed:
                yield entry.key

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return self.contains_key(key)

    def __getitem__(self, key: Any) -> Any:
        return self.get(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: Any) -> None:
        self.remove(key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HashMap):
            return NotImplemented
        if len(self) != len(other):
            return False
        if self._strategy is other._strategy:
            return self._covers(other)
        # each side judges the other's keys by its own policy, so == stays symmetric
        return self._covers(other) and other._covers(self)

    def _covers(self, other: "HashMap") -> bool:
        """Every entry of other has a counterpart here with an equivalent value."""
        same_policy = self._strategy is other._strategy
        for entry in other._entries:
            descriptor = entry.descriptor if same_policy else self._strategy.describe(entry.key)
            match = self._find(descriptor)
            if match is None or not self._strategy.equivalent(match.value, entry.value):
                return False
        return True

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        pairs = ", ".join(f"({e.key!r}, {e.value!r})" for e in self._entries)
        return f"{self.__class__.__name__}([{pairs}])"


__all__ = [
    "Comparator",
    "HashMap",
]
