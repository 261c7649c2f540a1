"""Application use cases: backend selection and shutdown."""

from __future__ import annotations

from .setup import BackendCandidate, SetupResult, setup_handler
from .shutdown import create_shutdown

__all__ = ["BackendCandidate", "SetupResult", "create_shutdown", "setup_handler"]
