from __future__ import annotations

import gzip
import os
import time
from pathlib import Path

import pytest

from lib_log_fabric.adapters.writers import RotatingFileWriter
from lib_log_fabric.domain import EmitError, LogLevel, SetupError
from tests.os_markers import OS_AGNOSTIC, POSIX_ONLY

pytestmark = [OS_AGNOSTIC]

# roughly 300 bytes
TINY_MB = 300 / (1024 * 1024)


def read_all(path: Path) -> list[str]:
    if path.suffix == ".gz":
        with gzip.open(path, "rt", encoding="utf-8") as handle:
            return handle.read().splitlines()
    return path.read_text(encoding="utf-8").splitlines()


def test_creates_parent_directories_and_appends(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "app.log"
    target.parent.mkdir(parents=True)
    target.write_text("existing\n", encoding="utf-8")

    writer = RotatingFileWriter(target)
    writer.write_line("new", LogLevel.INFO)
    writer.close()

    assert target.read_text(encoding="utf-8") == "existing\nnew\n"


def test_missing_parent_is_created(tmp_path: Path) -> None:
    writer = RotatingFileWriter(tmp_path / "a" / "b" / "app.log")
    writer.close()

    assert (tmp_path / "a" / "b" / "app.log").exists()


@POSIX_ONLY
def test_unwritable_location_is_a_setup_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")

    with pytest.raises(SetupError) as excinfo:
        RotatingFileWriter(blocker / "app.log")

    assert excinfo.value.backend == "file"


@pytest.mark.parametrize("compress", [False, True])
def test_rotation_keeps_every_line_in_order(tmp_path: Path, compress: bool) -> None:
    target = tmp_path / "app.log"
    writer = RotatingFileWriter(target, max_size_mb=TINY_MB, max_backups=0, max_age_days=0, compress=compress)

    lines = [f"line-{index:03d} " + "x" * 40 for index in range(40)]
    for line in lines:
        writer.write_line(line, LogLevel.INFO)
    backups = writer.backups()
    writer.close()

    assert backups, "expected at least one rotation"
    assert all(item.name.endswith(".gz") == compress for item in backups)
    collected: list[str] = []
    for item in reversed(backups):
        collected.extend(read_all(item))
    collected.extend(read_all(target))
    assert collected == lines
    assert target.stat().st_size <= 300


def test_max_backups_prunes_oldest(tmp_path: Path) -> None:
    target = tmp_path / "app.log"
    writer = RotatingFileWriter(target, max_size_mb=TINY_MB, max_backups=2, max_age_days=0, compress=False)

    for index in range(60):
        writer.write_line(f"entry-{index:03d} " + "y" * 40, LogLevel.INFO)
    backups = writer.backups()
    writer.close()

    assert len(backups) == 2
    newest_backup_last_line = read_all(backups[0])[-1]
    first_active_line = read_all(target)[0]
    assert int(newest_backup_last_line[6:9]) + 1 == int(first_active_line[6:9])


def test_max_age_prunes_old_backups(tmp_path: Path) -> None:
    target = tmp_path / "app.log"
    stale = tmp_path / "app-2000-01-01T00-00-00.000.log"
    stale.write_text("ancient\n", encoding="utf-8")
    old = time.time() - 3 * 24 * 60 * 60
    os.utime(stale, (old, old))

    writer = RotatingFileWriter(target, max_size_mb=TINY_MB, max_backups=0, max_age_days=1, compress=False)
    for index in range(20):
        writer.write_line(f"row-{index} " + "z" * 40, LogLevel.INFO)
    writer.close()

    assert not stale.exists()


def test_write_after_close_raises_emit_error(tmp_path: Path) -> None:
    writer = RotatingFileWriter(tmp_path / "app.log")
    writer.close()
    writer.close()

    with pytest.raises(EmitError):
        writer.write_line("late", LogLevel.INFO)


def test_negative_limits_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        RotatingFileWriter(tmp_path / "app.log", max_backups=-1)


def test_failed_compression_keeps_the_pending_line(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def disk_full(source: Path) -> Path:
        raise OSError("No space left on device")

    monkeypatch.setattr(RotatingFileWriter, "_gzip", staticmethod(disk_full))
    target = tmp_path / "app.log"
    writer = RotatingFileWriter(target, max_size_mb=TINY_MB, max_backups=0, max_age_days=0, compress=True)

    lines = [f"kept-{index:03d} " + "w" * 40 for index in range(20)]
    for line in lines:
        writer.write_line(line, LogLevel.INFO)
    backups = writer.backups()
    writer.close()

    assert backups and not any(item.name.endswith(".gz") for item in backups)
    collected: list[str] = []
    for item in reversed(backups):
        collected.extend(read_all(item))
    collected.extend(read_all(target))
    assert collected == lines


def test_pruning_ignores_unrelated_files_next_to_a_suffixless_log(tmp_path: Path) -> None:
    target = tmp_path / "app"
    bystanders = [tmp_path / "app-notes", tmp_path / "app-config.yaml", tmp_path / "app-2000-01-01.txt"]
    for item in bystanders:
        item.write_text("keep me\n", encoding="utf-8")

    writer = RotatingFileWriter(target, max_size_mb=TINY_MB, max_backups=1, max_age_days=0, compress=False)
    for index in range(30):
        writer.write_line(f"entry-{index:03d} " + "v" * 40, LogLevel.INFO)
    backups = writer.backups()
    writer.close()

    assert len(backups) == 1
    assert backups[0].name.startswith("app-")
    assert all(item.exists() for item in bystanders)
    assert not set(bystanders) & set(backups)
