"""Ports (protocols) separating the application layer from adapters."""

from __future__ import annotations

from .dispatch import DispatchPort
from .handler import HandlerPort
from .time import ClockPort
from .writer import LineWriterPort

__all__ = ["ClockPort", "DispatchPort", "HandlerPort", "LineWriterPort"]
