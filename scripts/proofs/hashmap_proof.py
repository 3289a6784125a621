# Procedure: deterministic proof (double-run) for HashMap ordering, identity and sort
"""
HashMap proof

Runs a fixed scenario twice on fresh maps and compares the stable JSON
transcripts. Exit code 0 on match, 1 on divergence or a failed check.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

# Ensure repo root is on sys.path so `import bb_stdlib` works when run as a script.
_REPO_ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(_REPO_ROOT))

from bb_stdlib.util import HashMap  # noqa: E402


class _Ref:
    def __init__(self, label: str) -> None:
        self.label = label


def _stable_json(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def _cursor_walk(m: HashMap) -> List[Any]:
    out: List[Any] = []
    m.rewind()
    while m.valid():
        k = m.key()
        out.append(k.label if isinstance(k, _Ref) else k)
        m.next()
    return out


def _run_once() -> Dict[str, Any]:
    m = HashMap().put("foo", "bar").put("baz", "lorem")
    values_initial = m.values()
    m.remove("foo")
    after_remove = {"size": m.size(), "foo": m.get("foo")}

    m = HashMap()
    m[1] = "int"
    m.put("A", 1).put("B", 2).put("A", 3)
    coerced = {"has_str_1": "1" in m, "value": m["1"]}

    r1, r2 = _Ref("same"), _Ref("same")
    m.put(r1, "first")
    identity = {"r1": m.contains_key(r1), "r2": m.contains_key(r2)}

    s = HashMap.create_from_array([("FooBar", [123, 456]), ("BarFoo", [456, 789]), ("FooBaz", [123, 789])])
    by_key = s.clone()
    by_key.sort(lambda a, b: (a > b) - (a < b), by_key=True)
    by_value = s.clone()
    by_value.sort(lambda a, b: sum(a) - sum(b))

    return {
        "values_initial": values_initial,
        "after_remove": after_remove,
        "order": _cursor_walk(m),
        "coerced": coerced,
        "identity": identity,
        "sorted_by_key": by_key.keys(),
        "sorted_by_value": by_value.keys(),
        "original_untouched": s.keys(),
    }


def _check(out: Dict[str, Any]) -> List[str]:
    failures: List[str] = []
    if out["values_initial"] != ["bar", "lorem"]:
        failures.append("values_initial")
    if out["after_remove"] != {"size": 1, "foo": None}:
        failures.append("after_remove")
    if out["order"] != [1, "A", "B", "same"]:
        failures.append("order")
    if out["identity"] != {"r1": True, "r2": False}:
        failures.append("identity")
    if out["sorted_by_key"] != ["BarFoo", "FooBar", "FooBaz"]:
        failures.append("sorted_by_key")
    if out["sorted_by_value"] != ["FooBar", "FooBaz", "BarFoo"]:
        failures.append("sorted_by_value")
    return failures


def main() -> int:
    out1 = _run_once()
    out2 = _run_once()

    s1 = _stable_json(out1)
    s2 = _stable_json(out2)

    if s1 != s2:
        print("HASHMAP_PROOF_FAIL: nondeterministic output detected", file=sys.stderr)
        print("---- run1 ----", file=sys.stderr)
        print(s1, file=sys.stderr)
        print("---- run2 ----", file=sys.stderr)
        print(s2, file=sys.stderr)
        return 1

    failures = _check(out1)
    if failures:
        print(f"HASHMAP_PROOF_FAIL: checks failed: {', '.join(failures)}", file=sys.stderr)
        print(s1, file=sys.stderr)
        return 1

    print("HASHMAP_PROOF_OK: deterministic double-run confirmed")
    print(s1)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
