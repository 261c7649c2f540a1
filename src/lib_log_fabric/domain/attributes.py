"""Closed attribute value model shared by records and handlers.

Attribute values are restricted to ``str``, ``int``, ``float``, ``bool`` and
nested string-keyed mappings of the same. :func:`coerce_value` is total: any
other input is rendered to its string form instead of being rejected, so an
emit never fails because of what a caller attached to a record.
"""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Union

Scalar = Union[str, int, float, bool]
AttributeValue = Union[Scalar, Mapping[str, "AttributeValue"]]


def coerce_value(value: Any) -> AttributeValue:
    """Return ``value`` as a member of the closed attribute variant.

    Examples
    --------
    >>> coerce_value(42)
    42
    >>> coerce_value(None)
    'None'
    >>> coerce_value(b"raw")
    'raw'
    >>> dict(coerce_value({"a": [1, 2]}))
    {'a': '[1, 2]'}
    """
    if isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, Mapping):
        return MappingProxyType({str(key): coerce_value(item) for key, item in value.items()})
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def coerce_attributes(attributes: Mapping[str, Any] | None) -> Mapping[str, AttributeValue]:
    """Return a read-only, coerced copy of ``attributes``."""
    if not attributes:
        return MappingProxyType({})
    return MappingProxyType({str(key): coerce_value(value) for key, value in attributes.items()})


def flatten(attributes: Mapping[str, AttributeValue], prefix: str = "") -> Iterator[tuple[str, Scalar]]:
    """Yield ``(dotted_key, scalar)`` pairs; empty nested mappings vanish.

    Examples
    --------
    >>> list(flatten({"http": {"method": "GET", "status": 200}}, "req."))
    [('req.http.method', 'GET'), ('req.http.status', 200)]
    """
    for key, value in attributes.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            yield from flatten(value, f"{full_key}.")
        else:
            yield full_key, value


def stringify(value: Scalar) -> str:
    """Render a scalar the way every sink prints it (booleans lowercase).

    Examples
    --------
    >>> stringify(True), stringify(42), stringify("x")
    ('true', '42', 'x')
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


__all__ = [
    "AttributeValue",
    "Scalar",
    "coerce_attributes",
    "coerce_value",
    "flatten",
    "stringify",
]
