"""Domain record describing a single structured log emission.

Purpose
-------
Provide an immutable representation of one emission travelling from the
logger façade to whichever handler is installed.

Contents
--------
* :class:`LogRecord` dataclass with timestamp helpers.

System Role
-----------
Sits in the domain layer so adapters only ever manipulate plain data; all
attribute coercion happens once, at construction time.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .attributes import AttributeValue, coerce_attributes
from .levels import LogLevel

_NANOS_PER_SECOND = 1_000_000_000


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Immutable record handed to :meth:`HandlerPort.emit`.

    Attributes
    ----------
    timestamp_ns:
        Unix time of the emission in nanoseconds.
    level:
        :class:`LogLevel` severity; names and numeric values are coerced.
    message:
        Rendered message text.
    attributes:
        Read-only, ordered mapping of coerced attribute values.
    groups:
        Group prefix stack applied to the record's own attribute keys.
    """

    timestamp_ns: int
    level: LogLevel
    message: str
    attributes: Mapping[str, AttributeValue] = field(default_factory=dict)
    groups: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp_ns", int(self.timestamp_ns))
        object.__setattr__(self, "level", LogLevel.coerce(self.level))
        object.__setattr__(self, "message", str(self.message))
        object.__setattr__(self, "attributes", coerce_attributes(self.attributes))
        object.__setattr__(self, "groups", tuple(str(group) for group in self.groups if group))

    @classmethod
    def now(
        cls,
        level: LogLevel | str | int,
        message: str,
        attributes: Mapping[str, Any] | None = None,
        *,
        groups: tuple[str, ...] = (),
    ) -> "LogRecord":
        """Build a record stamped with the current wall clock."""

        return cls(time.time_ns(), level, message, attributes or {}, groups)

    @property
    def timestamp(self) -> datetime:
        """Return the timestamp as a timezone-aware UTC datetime (microsecond precision)."""

        seconds, nanos = divmod(self.timestamp_ns, _NANOS_PER_SECOND)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(microsecond=nanos // 1000)

    def iso_timestamp(self) -> str:
        """Return the ISO-8601 UTC timestamp with millisecond precision.

        Examples
        --------
        >>> LogRecord(1_759_233_600_123_456_789, "info", "msg").iso_timestamp()
        '2025-09-30T12:00:00.123Z'
        """

        return self.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def replace(self, **changes: Any) -> "LogRecord":
        """Return a copied record with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["LogRecord"]
