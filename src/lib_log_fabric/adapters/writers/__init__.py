"""Local line writers used by baseline sinks."""

from __future__ import annotations

from .console import ConsoleWriter
from .rotating_file import RotatingFileWriter

__all__ = ["ConsoleWriter", "RotatingFileWriter"]
