"""
config.py

Responsibility: Describe what raylib-init creates, vendors and runs.

The built-in defaults reproduce the standard raylib project layout. A YAML
file can override any part of it; keys that are absent keep their defaults.

The CLI treats the resulting `InitConfig` as the single source of truth.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from raylib_init.tree import FORMAT_ONLY, POLICIES


class ConfigError(ValueError):
    pass


def _default_build_command() -> tuple[str, ...]:
    if os.name == "nt":
        return ("cmd", "/c", "build.bat")
    return ("./debug.sh",)


@dataclass(frozen=True)
class DependencySpec:
    """The vendored dependency: where to fetch it and which parts to keep."""

    name: str = "raylib"
    repo_url: str = "https://github.com/raysan5/raylib.git"
    ref: str | None = None
    shallow: bool = True
    directories: tuple[tuple[str, str], ...] = (
        ("src", "deps/raylib/src"),
        ("cmake", "deps/raylib/cmake"),
    )
    files: tuple[tuple[str, str], ...] = (
        ("CMakeLists.txt", "deps/raylib/CMakeLists.txt"),
        ("CMakeOptions.txt", "deps/raylib/CMakeOptions.txt"),
        ("raylib.pc.in", "deps/raylib/raylib.pc.in"),
        ("README.md", "deps/raylib/README.md"),
        ("LICENSE", "deps/raylib/LICENSE"),
    )
    filter_policy: str = FORMAT_ONLY


@dataclass(frozen=True)
class InitConfig:
    """Everything the orchestrator needs besides the project name."""

    directories: tuple[str, ...] = ("src", "res", "deps", "deps/raylib")
    dependency: DependencySpec = field(default_factory=DependencySpec)
    build_command: tuple[str, ...] = field(default_factory=_default_build_command)
    strict_name: bool = False


def default_config() -> InitConfig:
    return InitConfig()


def _str_list(value: Any, key: str) -> tuple[str, ...]:
    if isinstance(value, str):
        raise ConfigError(f"`{key}` must be a list of strings, not a single string.")
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"`{key}` must be a list of non-empty strings.")
    return tuple(value)


def _path_pairs(value: Any, key: str) -> tuple[tuple[str, str], ...]:
    """
    Accept either a mapping `{src: dest}` or a list of `{src: ..., dest: ...}`
    objects. Order is preserved.
    """
    if isinstance(value, dict):
        items = list(value.items())
    elif isinstance(value, list):
        items = []
        for item in value:
            if not isinstance(item, dict) or "src" not in item or "dest" not in item:
                raise ConfigError(f"Entries of `{key}` must be objects with `src` and `dest`.")
            items.append((item["src"], item["dest"]))
    else:
        raise ConfigError(f"`{key}` must be a mapping or a list of src/dest objects.")

    pairs: list[tuple[str, str]] = []
    for src, dest in items:
        src = str(src or "").strip()
        dest = str(dest or "").strip()
        if not src or not dest:
            raise ConfigError(f"`{key}` entries need a non-empty source and destination.")
        pairs.append((src, dest))
    return tuple(pairs)


def _parse_dependency(raw: Any, base: DependencySpec) -> DependencySpec:
    if raw is None:
        return base
    if not isinstance(raw, dict):
        raise ConfigError("`dependency` must be an object/mapping when provided.")

    changes: dict[str, Any] = {}
    for key in ("name", "repo_url"):
        if key in raw:
            value = str(raw[key] or "").strip()
            if not value:
                raise ConfigError(f"`dependency.{key}` must not be empty.")
            changes[key] = value

    if "ref" in raw:
        ref = raw["ref"]
        if ref is not None:
            ref = str(ref).strip() or None
        changes["ref"] = ref

    if "shallow" in raw:
        changes["shallow"] = bool(raw["shallow"])

    if "directories" in raw:
        changes["directories"] = _path_pairs(raw["directories"] or {}, "dependency.directories")
    if "files" in raw:
        changes["files"] = _path_pairs(raw["files"] or {}, "dependency.files")

    if "filter_policy" in raw:
        policy = str(raw["filter_policy"]).strip()
        if policy not in POLICIES:
            raise ConfigError(
                f"`dependency.filter_policy` must be one of: {', '.join(POLICIES)} (got {policy!r})."
            )
        changes["filter_policy"] = policy

    return replace(base, **changes)


def parse_config(config_path: str | Path, base: InitConfig | None = None) -> InitConfig:
    """
    Parse a YAML config file into an `InitConfig`.

    Recognised top-level keys:
    - directories: list[str] (creation order; parents first)
    - dependency: name, repo_url, ref, shallow, directories, files, filter_policy
    - build_command: list[str]
    - strict_name: bool
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError("Config must be a mapping/object at the top level.")

    config = base or default_config()
    changes: dict[str, Any] = {}

    if "directories" in data:
        changes["directories"] = _str_list(data["directories"], "directories")
    if "dependency" in data:
        changes["dependency"] = _parse_dependency(data["dependency"], config.dependency)
    if "build_command" in data:
        command = _str_list(data["build_command"], "build_command")
        if not command:
            raise ConfigError("`build_command` must not be empty.")
        changes["build_command"] = command
    if "strict_name" in data:
        changes["strict_name"] = bool(data["strict_name"])

    return replace(config, **changes)
