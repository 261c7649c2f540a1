"""Error taxonomy of the emission fabric."""

from __future__ import annotations


class LogFabricError(Exception):
    """Base class for every error raised by the fabric."""


class SetupError(LogFabricError):
    """A backend could not be constructed; the setup chain moves on.

    Attributes
    ----------
    backend:
        Name of the candidate that failed (``otlp``, ``loki``, ``syslog``...).
    """

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(f"{backend}: {message}")
        self.backend = backend


class EmitError(LogFabricError):
    """A synchronous emit leg (baseline write or syslog send) failed."""


class CloseError(LogFabricError):
    """Releasing a handler's resources failed."""


__all__ = ["CloseError", "EmitError", "LogFabricError", "SetupError"]
