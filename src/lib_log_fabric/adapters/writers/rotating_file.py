"""Append-only file writer with size-based rotation.

Purpose
-------
Persist baseline lines to a local file, rotating it once it grows past a
size limit and pruning old backups by count and age.

Contents
--------
* :class:`RotatingFileWriter` - :class:`LineWriterPort` implementation.

System Role
-----------
Backs the ``file`` candidate of the setup chain. Opening the file happens in
the constructor so an unusable path becomes a :class:`SetupError` before the
writer is installed.

Rotation
--------
The active file is renamed to ``<stem>-<UTC timestamp><suffix>`` (plus
``.gz`` when compression is on) and a fresh file is opened. Everything runs
under the writer lock, so lines are never reordered or lost across a
rotation. Compression and pruning run after the pending line is written;
their failures are logged through :mod:`logging` and never drop the line.
Only names of the form ``<stem>-<timestamp>[-n]<suffix>[.gz]`` count as
backups.
"""

from __future__ import annotations

import glob
import gzip
import logging
import os
import re
import shutil
import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from lib_log_fabric.application.ports.writer import LineWriterPort
from lib_log_fabric.domain.errors import CloseError, EmitError, SetupError
from lib_log_fabric.domain.levels import LogLevel

_MEGABYTE = 1024 * 1024
_SECONDS_PER_DAY = 24 * 60 * 60
_STAMP_PATTERN = r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{3}"

LOGGER = logging.getLogger(__name__)


class RotatingFileWriter(LineWriterPort):
    """Write lines to ``path`` and rotate according to the configured policy."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        max_size_mb: float = 100,
        max_backups: int = 5,
        max_age_days: float = 30,
        compress: bool = True,
    ) -> None:
        """Create parent directories and open ``path`` in append mode.

        Parameters
        ----------
        max_size_mb:
            Rotate before a write would push the file past this size; ``0``
            disables rotation.
        max_backups:
            Number of rotated files to keep; ``0`` keeps all of them.
        max_age_days:
            Rotated files older than this are removed; ``0`` disables the check.
        compress:
            Gzip rotated files.

        Raises
        ------
        SetupError
            When the directory or the file cannot be created.
        """
        if max_size_mb < 0 or max_backups < 0 or max_age_days < 0:
            raise ValueError("rotation limits must not be negative")
        self._path = Path(path)
        self._max_bytes = int(max_size_mb * _MEGABYTE)
        self._max_backups = max_backups
        self._max_age = max_age_days * _SECONDS_PER_DAY
        self._compress = compress
        self._lock = threading.Lock()
        self._closed = False
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = self._open()
        except OSError as exc:
            raise SetupError("file", f"cannot open {self._path}: {exc}") from exc
        self._size = os.fstat(self._stream.fileno()).st_size

    @property
    def path(self) -> Path:
        return self._path

    def write_line(self, line: str, level: LogLevel) -> None:
        """Append ``line``; rotate first when the size limit would be exceeded.

        The line is written before rotated files are compressed or pruned, so
        a failing cleanup never loses it.
        """
        data = f"{line}\n".encode("utf-8")
        with self._lock:
            if self._closed:
                raise EmitError(f"file writer for {self._path} is closed")
            rotated: Path | None = None
            try:
                if self._max_bytes and self._size and self._size + len(data) > self._max_bytes:
                    rotated = self._rotate()
                self._stream.write(data)
                self._stream.flush()
            except OSError as exc:
                raise EmitError(f"write to {self._path} failed: {exc}") from exc
            self._size += len(data)
            if rotated is not None:
                self._tidy(rotated)

    def close(self) -> None:
        """Close the active file once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._stream.close()
            except OSError as exc:
                raise CloseError(f"closing {self._path} failed: {exc}") from exc

    def backups(self) -> list[Path]:
        """Return rotated files, newest first."""
        pattern = self._backup_pattern()
        candidates = []
        for item in self._path.parent.glob(f"{glob.escape(self._path.stem)}-*"):
            match = pattern.match(item.name)
            if match is not None:
                candidates.append((match["stamp"], int(match["counter"] or 0), item))
        return [item for *_, item in sorted(candidates, key=lambda entry: entry[:2], reverse=True)]

    def _backup_pattern(self) -> re.Pattern[str]:
        return re.compile(
            rf"^{re.escape(self._path.stem)}-(?P<stamp>{_STAMP_PATTERN})(?:-(?P<counter>\d+))?"
            rf"{re.escape(self._path.suffix)}(?:\.gz)?$"
        )

    def _open(self) -> BinaryIO:
        return open(self._path, "ab")

    def _rotate(self) -> Path | None:
        """Rename the active file and reopen a fresh one; ``None`` when the rename failed."""
        self._stream.close()
        target = self._backup_name()
        try:
            self._path.rename(target)
        except OSError as exc:
            LOGGER.warning("Rotating %s failed, appending to it instead: %s", self._path, exc)
            return None
        finally:
            self._stream = self._open()
            self._size = self._stream.tell()
        return target

    def _tidy(self, rotated: Path) -> None:
        """Compress and prune after a rotation; failures are logged, not raised."""
        try:
            if self._compress:
                self._gzip(rotated)
            self._prune()
        except OSError as exc:
            LOGGER.warning("Cleaning up rotated logs of %s failed: %s", self._path, exc)

    def _backup_name(self) -> Path:
        now = datetime.now(timezone.utc)
        stamp = f"{now:%Y-%m-%dT%H-%M-%S}.{now.microsecond // 1000:03d}"
        base = f"{self._path.stem}-{stamp}"
        candidate = self._path.with_name(f"{base}{self._path.suffix}")
        counter = 1
        while candidate.exists() or candidate.with_name(f"{candidate.name}.gz").exists():
            candidate = self._path.with_name(f"{base}-{counter}{self._path.suffix}")
            counter += 1
        return candidate

    @staticmethod
    def _gzip(source: Path) -> Path:
        target = source.with_name(f"{source.name}.gz")
        with open(source, "rb") as raw, gzip.open(target, "wb") as packed:
            shutil.copyfileobj(raw, packed)
        source.unlink()
        return target

    def _prune(self) -> None:
        backups = self.backups()
        doomed: list[Path] = []
        if self._max_backups:
            doomed.extend(backups[self._max_backups :])
        if self._max_age:
            cutoff = time.time() - self._max_age
            for item in backups:
                if item in doomed:
                    continue
                try:
                    expired = item.stat().st_mtime < cutoff
                except FileNotFoundError:
                    continue
                if expired:
                    doomed.append(item)
        for item in doomed:
            item.unlink(missing_ok=True)


__all__ = ["RotatingFileWriter"]
