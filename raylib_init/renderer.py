"""
renderer.py

Responsibility: Provision the project skeleton on disk.

Rules:
- Directories are created in the given order; parents must come first.
- Any directory creation failure (including "already exists") is fatal.
- Template lines containing Jinja2 markers are rendered with the project name;
  every other line is written unchanged.
- Lines are terminated with LF regardless of platform.

This module intentionally does NOT know about git, vendoring, or CLI parsing.
Errors are raised as `ProvisionError`; the caller decides how to exit.
"""

from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, StrictUndefined

from raylib_init.templates import FileTemplate

log = logging.getLogger(__name__)

_STRICT_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")
_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

_env = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


class ProvisionError(RuntimeError):
    pass


@dataclass(frozen=True)
class RenderResult:
    written_files: int
    executable_files: int


def validate_project_name(name: str, *, strict: bool = False) -> str:
    """
    Return `name` unchanged if acceptable.

    Without `strict` only the empty string is rejected; the name is substituted
    verbatim into shell scripts and CMake, so callers that need safe output
    should pass `strict=True`.
    """
    if not name:
        raise ProvisionError("Project name must not be empty.")
    if strict and not _STRICT_NAME.match(name):
        raise ProvisionError(
            f"Invalid project name {name!r}: use letters, digits, '_' or '-', not starting with a digit."
        )
    return name


def create_directories(paths: Iterable[str], *, root: str | Path = ".") -> list[Path]:
    created: list[Path] = []
    root_path = Path(root)
    for rel in paths:
        path = root_path / rel
        try:
            path.mkdir(mode=0o777)
        except OSError as e:
            raise ProvisionError(f"Error creating directory {rel}: {e.strerror or e}") from e
        log.info("Created directory: %s", rel)
        created.append(path)
    return created


def render_line(line: str, project_name: str) -> str:
    if ("{{" in line) or ("{%" in line) or ("{#" in line):
        try:
            return _env.from_string(line).render(project_name=project_name)
        except Exception as e:  # noqa: BLE001 - surface as ProvisionError
            raise ProvisionError(f"Failed rendering template line: {line!r}") from e
    return line


def create_templated_file(path: str | Path, template_lines: Iterable[str], project_name: str) -> Path:
    """
    Write `template_lines` to `path` (create or truncate), one per line.
    """
    path = Path(path)
    rendered = [render_line(line, project_name) for line in template_lines]
    try:
        fh = path.open("w", encoding="utf-8", errors="surrogateescape", newline="\n")
    except OSError as e:
        raise ProvisionError(f"Failed to open file {path}: {e.strerror or e}") from e

    log.info("Creating %s...", path)
    try:
        with fh:
            for line in rendered:
                fh.write(line)
                fh.write("\n")
    except (OSError, UnicodeError) as e:
        raise ProvisionError(f"Failed to write file {path}: {e}") from e
    return path


def _make_executable(path: Path) -> None:
    try:
        mode = path.stat().st_mode
        path.chmod(mode | _EXEC_BITS)
    except OSError as e:
        raise ProvisionError(f"Failed to make {path} executable: {e.strerror or e}") from e


def write_templates(
    templates: Iterable[FileTemplate],
    project_name: str,
    *,
    root: str | Path = ".",
) -> RenderResult:
    root_path = Path(root)
    written = 0
    executables = 0
    for template in templates:
        dst_path = root_path / template.path
        create_templated_file(dst_path, template.lines, project_name)
        written += 1
        # No executable bit on Windows.
        if template.executable and os.name != "nt":
            _make_executable(dst_path)
            executables += 1
    return RenderResult(written_files=written, executable_files=executables)
