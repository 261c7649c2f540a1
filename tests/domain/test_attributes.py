from __future__ import annotations

import math
from types import MappingProxyType

import pytest

from lib_log_fabric.domain.attributes import coerce_attributes, coerce_value, flatten, stringify
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


class Opaque:
    def __str__(self) -> str:
        return "<opaque>"


@pytest.mark.parametrize("value", ["text", 7, 2.5, True, False])
def test_scalars_pass_through(value: object) -> None:
    assert coerce_value(value) == value
    assert type(coerce_value(value)) is type(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "None"),
        ([1, 2], "[1, 2]"),
        ((1,), "(1,)"),
        (Opaque(), "<opaque>"),
        (b"caf\xc3\xa9", "café"),
        (b"\xff", "�"),
        (math.inf, "inf"),
        (math.nan, "nan"),
    ],
)
def test_other_values_become_strings(value: object, expected: str) -> None:
    assert coerce_value(value) == expected


def test_nested_mappings_are_coerced_recursively_and_read_only() -> None:
    coerced = coerce_value({"db": {"rows": 3, "tags": ["a"]}, 5: None})

    assert isinstance(coerced, MappingProxyType)
    assert dict(coerced["db"]) == {"rows": 3, "tags": "['a']"}
    assert coerced["5"] == "None"
    with pytest.raises(TypeError):
        coerced["db"] = "x"  # type: ignore[index]


def test_coerce_attributes_copies_input() -> None:
    source = {"a": 1}
    coerced = coerce_attributes(source)
    source["a"] = 2

    assert coerced["a"] == 1
    assert dict(coerce_attributes(None)) == {}


def test_flatten_joins_nested_keys_and_drops_empty_mappings() -> None:
    pairs = list(flatten(coerce_attributes({"a": {"b": {"c": 1}, "empty": {}}, "d": "x"}), "g."))

    assert pairs == [("g.a.b.c", 1), ("g.d", "x")]


@pytest.mark.parametrize("value, expected", [(True, "true"), (False, "false"), (3, "3"), (1.5, "1.5"), ("s", "s")])
def test_stringify(value: object, expected: str) -> None:
    assert stringify(value) == expected  # type: ignore[arg-type]
