"""Attribute context bound to a handler instance.

Purpose
-------
Capture the attributes and group prefixes a handler accumulates through
``with_attributes`` / ``with_group`` as an immutable value, so deriving a
handler never touches the original or any record already emitted.

Contents
--------
* :class:`HandlerContext` - frozen dataclass with derivation and resolution
  helpers.

System Role
-----------
Every baseline handler owns exactly one context; remote handlers reach it
through the baseline they embed.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .attributes import Scalar, coerce_attributes, flatten
from .records import LogRecord


def _prefix(groups: tuple[str, ...]) -> str:
    return "".join(f"{group}." for group in groups)


@dataclass(slots=True, frozen=True)
class HandlerContext:
    """Immutable attribute set plus group stack carried by a handler.

    Attributes
    ----------
    attributes:
        Flattened ``(key, value)`` pairs, already prefixed with the groups that
        were open when they were bound.
    groups:
        Group names applied to attributes bound or emitted afterwards.

    Examples
    --------
    >>> ctx = HandlerContext().with_attributes({"svc": "api"}).with_group("req")
    >>> ctx = ctx.with_attributes({"id": 7})
    >>> ctx.attributes
    (('svc', 'api'), ('req.id', 7))
    """

    attributes: tuple[tuple[str, Scalar], ...] = ()
    groups: tuple[str, ...] = ()

    @property
    def prefix(self) -> str:
        """Return the dotted prefix for keys bound under the current groups."""

        return _prefix(self.groups)

    def with_attributes(self, extra: Mapping[str, Any] | None) -> "HandlerContext":
        """Return a context with ``extra`` flattened under the current prefix."""

        if not extra:
            return self
        added = tuple(flatten(coerce_attributes(extra), self.prefix))
        return HandlerContext(self.attributes + added, self.groups)

    def with_group(self, name: str) -> "HandlerContext":
        """Return a context that prefixes later keys with ``name.``; blank names are ignored."""

        if not name:
            return self
        return HandlerContext(self.attributes, self.groups + (name,))

    def resolve(self, record: LogRecord) -> list[tuple[str, Scalar]]:
        """Return the ordered attribute pairs a sink renders for ``record``.

        Bound attributes come first, then the record's own attributes under the
        context groups followed by the record groups. A repeated key keeps its
        first position and takes the latest value.
        """

        merged: dict[str, Scalar] = dict(self.attributes)
        record_prefix = self.prefix + _prefix(record.groups)
        for key, value in flatten(record.attributes, record_prefix):
            merged[key] = value
        return list(merged.items())


__all__ = ["HandlerContext"]
