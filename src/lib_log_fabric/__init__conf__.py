"""Static package metadata surfaced by the CLI and the OTLP scope.

Values here mirror ``pyproject.toml``; keep them in sync when releasing.
"""

from __future__ import annotations

from typing import Callable

name = "lib_log_fabric"
title = "Structured-log emission fabric with a priority chain of backends"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_fabric"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_fabric"


def info_lines() -> list[str]:
    """Return the metadata banner as individual lines."""

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    pad = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:", ""]
    lines.extend(f"    {label.ljust(pad)} = {value}" for label, value in fields)
    return lines


def print_info(*, writer: Callable[[str], None] | None = None) -> None:
    """Print the metadata banner through ``writer`` (defaults to :func:`print`).

    Examples
    --------
    >>> captured = []
    >>> print_info(writer=captured.append)
    >>> captured[0]
    'Info for lib_log_fabric:'
    """

    emit = writer or print
    for line in info_lines():
        emit(line)


__all__ = ["info_lines", "print_info", "name", "title", "version", "homepage", "shell_command"]
