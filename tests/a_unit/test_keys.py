"""Unit tests for bb_stdlib.util.keys."""

from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from fractions import Fraction

import pytest

from bb_stdlib.util.keys import DEFAULT_KINDS, KeyDescriptor, KeyKind, KeyStrategy, identity_token


class Point:
    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


class Label:
    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text


@pytest.fixture
def strategy() -> KeyStrategy:
    return KeyStrategy()


class TestClassify:
    """Tests for the type dispatch table."""

    @pytest.mark.parametrize("value", [None, True, 1, 1.5, 2j, Decimal("1.1"), Fraction(1, 3), "x", b"x"])
    def test_scalars(self, strategy: KeyStrategy, value: object) -> None:
        assert strategy.classify(value) is KeyKind.SCALAR

    @pytest.mark.parametrize("value", [[1], (1,), {"a": 1}, {1}, frozenset({1})])
    def test_composites(self, strategy: KeyStrategy, value: object) -> None:
        assert strategy.classify(value) is KeyKind.COMPOSITE

    def test_objects_are_references(self, strategy: KeyStrategy) -> None:
        assert strategy.classify(Point(1, 2)) is KeyKind.REFERENCE
        assert strategy.classify(object()) is KeyKind.REFERENCE
        assert strategy.classify(len) is KeyKind.REFERENCE

    def test_builtin_subclass_follows_base(self, strategy: KeyStrategy) -> None:
        assert strategy.classify(OrderedDict(a=1)) is KeyKind.COMPOSITE

    def test_register_overrides(self, strategy: KeyStrategy) -> None:
        assert strategy.classify(Label("a")) is KeyKind.REFERENCE
        strategy.register(Label, KeyKind.SCALAR)
        assert strategy.classify(Label("a")) is KeyKind.SCALAR

    def test_register_via_constructor(self) -> None:
        s = KeyStrategy(kinds={Label: KeyKind.SCALAR})
        assert s.classify(Label("a")) is KeyKind.SCALAR

    def test_register_rejects_non_type(self, strategy: KeyStrategy) -> None:
        with pytest.raises(TypeError):
            strategy.register("Label", KeyKind.SCALAR)  # type: ignore[arg-type]

    def test_register_does_not_touch_defaults(self) -> None:
        KeyStrategy(kinds={Label: KeyKind.SCALAR})
        assert Label not in DEFAULT_KINDS


class TestScalarDescriptors:
    """Value equality and array-key coercion for scalar keys."""

    def test_numeric_string_coerces(self, strategy: KeyStrategy) -> None:
        assert strategy.describe("123") == strategy.describe(123)
        assert strategy.describe("-7") == strategy.describe(-7)
        assert strategy.describe("0") == strategy.describe(0)

    @pytest.mark.parametrize("text", ["0123", "-0", "+1", " 1", "1 ", "1.0", "1e3", "١٢"])
    def test_non_canonical_strings_stay_text(self, strategy: KeyStrategy, text: str) -> None:
        d = strategy.describe(text)
        assert d.canonical == f'["s","{text}"]'

    def test_coercion_can_be_disabled(self) -> None:
        s = KeyStrategy(numeric_string_keys=False)
        assert s.describe("1") != s.describe(1)

    def test_bool_and_integral_float(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(True) == strategy.describe(1)
        assert strategy.describe(False) == strategy.describe(0)
        assert strategy.describe(2.0) == strategy.describe(2)

    def test_exact_rationals(self, strategy: KeyStrategy) -> None:
        half = strategy.describe(0.5)
        assert half == strategy.describe(Fraction(1, 2))
        assert half == strategy.describe(Decimal("0.5"))
        assert strategy.describe(0.1) != strategy.describe(Decimal("0.1"))

    def test_complex(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(3 + 0j) == strategy.describe(3)
        assert strategy.describe(1 + 2j) != strategy.describe(1)

    def test_special_floats(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(float("nan")) == strategy.describe(float("nan"))
        assert strategy.describe(float("inf")) != strategy.describe(float("-inf"))
        assert strategy.describe(Decimal("NaN")) == strategy.describe(float("nan"))
        assert strategy.describe(Decimal("sNaN")) == strategy.describe(float("nan"))

    def test_integers_beyond_str_digit_limit(self, strategy: KeyStrategy) -> None:
        big = 10 ** 5000
        assert strategy.describe(big) == strategy.describe(big)
        assert strategy.describe(big) != strategy.describe(big + 1)
        repunit = (big - 1) // 9
        assert strategy.describe("1" * 5000) == strategy.describe(repunit)
        assert strategy.describe(Decimal("1e5000")) == strategy.describe(big)
        assert strategy.describe(Fraction(1, big)) != strategy.describe(Fraction(1, big + 1))

    def test_none_distinct_from_empty_string(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(None) != strategy.describe("")

    def test_bytes_distinct_from_str(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(b"foo") != strategy.describe("foo")

    def test_registered_scalar_keyed_by_text(self, strategy: KeyStrategy) -> None:
        strategy.register(Label, KeyKind.SCALAR)
        assert strategy.describe(Label("FooBar")) == strategy.describe("FooBar")
        assert strategy.describe(Label("42")) == strategy.describe(42)


class TestCompositeDescriptors:
    """Canonical serialization and deep equality for composite keys."""

    def test_equal_contents_equal_descriptor(self, strategy: KeyStrategy) -> None:
        assert strategy.describe(["foo", ["bar"]]) == strategy.describe(["foo", ["bar"]])

    def test_order_matters_for_sequences(self, strategy: KeyStrategy) -> None:
        assert strategy.describe([1, 2]) != strategy.describe([2, 1])

    def test_list_and_tuple_differ(self, strategy: KeyStrategy) -> None:
        assert strategy.describe([1, 2]) != strategy.describe((1, 2))

    def test_dict_order_ignored(self, strategy: KeyStrategy) -> None:
        assert strategy.describe({"a": 1, "b": 2}) == strategy.describe({"b": 2, "a": 1})
        assert strategy.describe(OrderedDict(a=1)) == strategy.describe({"a": 1})

    def test_dict_order_ignored_when_keys_coerce_alike(self, strategy: KeyStrategy) -> None:
        assert strategy.describe({1: "a", "1": "b"}) == strategy.describe({"1": "b", 1: "a"})

    def test_dict_keys_coerced(self, strategy: KeyStrategy) -> None:
        assert strategy.describe({"1": "x"}) == strategy.describe({1: "x"})

    def test_sets(self, strategy: KeyStrategy) -> None:
        assert strategy.describe({3, 1, 2}) == strategy.describe(frozenset({1, 2, 3}))
        assert strategy.describe({1}) != strategy.describe([1])

    def test_nested_reference_uses_identity(self, strategy: KeyStrategy) -> None:
        p = Point(1, 2)
        assert strategy.describe([p]) == strategy.describe([p])
        assert strategy.describe([p]) != strategy.describe([Point(1, 2)])

    def test_cycle_does_not_recurse_forever(self, strategy: KeyStrategy) -> None:
        a: list = [1]
        a.append(a)
        b: list = [1]
        b.append(b)
        assert strategy.describe(a) == strategy.describe(b)
        assert '["cycle",1]' in strategy.describe(a).canonical

    def test_shared_non_cyclic_child(self, strategy: KeyStrategy) -> None:
        child = [1]
        assert strategy.describe([child, child]) == strategy.describe([[1], [1]])


class TestReferenceDescriptors:
    """Identity hashing for reference keys."""

    def test_same_instance(self, strategy: KeyStrategy) -> None:
        p = Point(1, 2)
        assert strategy.describe(p) == strategy.describe(p)

    def test_equal_content_distinct(self, strategy: KeyStrategy) -> None:
        p1, p2 = Point(1, 2), Point(1, 2)
        assert strategy.describe(p1) != strategy.describe(p2)

    def test_identity_token_shape(self) -> None:
        p = Point(1, 2)
        assert identity_token(p) == f"{__name__}.Point@{id(p):x}"

    def test_descriptor_kind(self, strategy: KeyStrategy) -> None:
        d = strategy.describe(Point(0, 0))
        assert isinstance(d, KeyDescriptor)
        assert d.kind is KeyKind.REFERENCE


class TestEquivalent:
    """Tests for KeyStrategy.equivalent."""

    def test_rules(self, strategy: KeyStrategy) -> None:
        p = Point(1, 2)
        assert strategy.equivalent(p, p)
        assert not strategy.equivalent(p, Point(1, 2))
        assert strategy.equivalent("1", 1)
        assert strategy.equivalent({"a": [1]}, {"a": [1]})
        assert not strategy.equivalent([1], [2])

    def test_bucket_ignored_in_equality(self) -> None:
        assert KeyDescriptor(KeyKind.SCALAR, 1, '["n"]') == KeyDescriptor(KeyKind.SCALAR, 2, '["n"]')
