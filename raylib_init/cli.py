"""
cli.py

Responsibility: CLI entrypoint for raylib-init.

High-level flow (single command):
1) Create the project directories and write the generated files
2) Clone the dependency (raylib) into a temporary directory
3) Vendor the required subtrees and files into `deps/`
4) Remove the temporary clone
5) Run the build command

This module should orchestrate behavior but keep concerns isolated:
- Provisioning: `renderer.py`
- Vendoring copy/removal: `tree.py`
- Configuration: `config.py`
- GitHub API: `github_client.py`
"""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from dataclasses import replace
from pathlib import Path

from raylib_init.config import ConfigError, DependencySpec, InitConfig, default_config, parse_config
from raylib_init.github_client import GitHubClient, GitHubError, parse_github_url
from raylib_init.renderer import ProvisionError, create_directories, validate_project_name, write_templates
from raylib_init.templates import PROJECT_TEMPLATES
from raylib_init.tree import CopyResult, copy_file, copy_tree, filter_for_policy, remove_tree

log = logging.getLogger(__name__)


class CLIError(RuntimeError):
    pass


def _run(cmd: list[str], *, cwd: Path, capture: bool = True) -> None:
    """
    Run a subprocess command, raising a CLIError on launch failure or non-zero exit.

    Interactive commands (the build/debug script) must run with `capture=False`.
    """
    shown = " ".join(cmd)
    log.debug("Running `%s` in %s", shown, cwd)
    try:
        if capture:
            proc = subprocess.run(
                cmd, cwd=str(cwd), check=True, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
            )
            if proc.stdout:
                log.debug(proc.stdout.rstrip())
        else:
            subprocess.run(cmd, cwd=str(cwd), check=True)
    except OSError as e:
        raise CLIError(f"Failed to execute `{shown}` command: {e}") from e
    except subprocess.CalledProcessError as e:
        details = f"\n\n{e.stdout}" if e.stdout else ""
        raise CLIError(f"`{shown}` command failed with exit status {e.returncode}{details}") from e


def _resolve_ref(dep: DependencySpec, token: str | None) -> str | None:
    if dep.ref != "latest":
        return dep.ref
    owner, name = parse_github_url(dep.repo_url)
    tag = GitHubClient(token).get_latest_release_tag(owner, name)
    log.info("Using %s release %s", dep.name, tag)
    return tag


def _clone_dependency(dep: DependencySpec, *, ref: str | None, root: Path) -> Path:
    clone_dir = root / dep.name
    cmd = ["git", "clone"]
    if dep.shallow:
        cmd += ["--depth", "1"]
    if ref:
        cmd += ["--branch", ref]
    cmd += [dep.repo_url, dep.name]

    log.info("Cloning %s...", dep.repo_url)
    _run(cmd, cwd=root)
    return clone_dir


def _vendor(dep: DependencySpec, *, clone_dir: Path, root: Path) -> CopyResult:
    total = CopyResult()
    for src, dest in dep.directories:
        tree_filter = filter_for_policy(dep.filter_policy, dest)
        result = copy_tree(clone_dir / src, root / dest, tree_filter)
        log.info("Vendored %s -> %s (%d files)", src, dest, result.copied_files)
        total.merge(result)

    for src, dest in dep.files:
        dest_path = root / dest
        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log.warning("Skipping %s: cannot create %s (%s)", src, dest_path.parent, e.strerror or e)
            total.failed_files += 1
            continue
        if copy_file(clone_dir / src, dest_path):
            total.copied_files += 1
        else:
            total.failed_files += 1

    if total.failed_files:
        log.warning("%d file(s) could not be vendored", total.failed_files)
    return total


def _cleanup_clone(clone_dir: Path) -> None:
    log.info("Removing %s...", clone_dir.name)
    remove_tree(clone_dir)
    try:
        clone_dir.rmdir()
    except OSError as e:
        log.warning("Could not remove %s (%s)", clone_dir, e.strerror or e)


def _load_config(args: argparse.Namespace) -> InitConfig:
    config = parse_config(args.config) if args.config else default_config()

    if args.ref is not None:
        config = replace(config, dependency=replace(config.dependency, ref=args.ref.strip() or None))
    if args.strict_name:
        config = replace(config, strict_name=True)
    return config


def init_cmd(args: argparse.Namespace) -> int:
    config = _load_config(args)
    project_name = validate_project_name(args.project_name, strict=config.strict_name)

    root = Path(args.directory).resolve()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProvisionError(f"Error creating directory {root}: {e.strerror or e}") from e

    create_directories(config.directories, root=root)
    write_templates(PROJECT_TEMPLATES, project_name, root=root)

    dep = config.dependency
    token = args.github_token or os.environ.get("GITHUB_TOKEN")
    ref = _resolve_ref(dep, token)
    clone_dir = _clone_dependency(dep, ref=ref, root=root)
    _vendor(dep, clone_dir=clone_dir, root=root)
    _cleanup_clone(clone_dir)

    if args.skip_build:
        log.info("Skipping build (run %s to build)", " ".join(config.build_command))
    else:
        _run(list(config.build_command), cwd=root, capture=False)

    log.info("Finished!")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="raylib-init",
        description="Create a raylib C project with a vendored copy of raylib",
    )
    p.add_argument("project_name", nargs="?", help="Project name (used for the CMake target and window title)")
    p.add_argument("-C", "--directory", default=".", help="Directory to create the project in (default: .)")
    p.add_argument("--config", default=None, help="YAML file overriding directories, dependency or build command")
    p.add_argument("--ref", default=None, help="Dependency branch or tag to clone ('latest' = newest release)")
    p.add_argument("--skip-build", action="store_true", help="Do not run the build command at the end")
    p.add_argument(
        "--strict-name",
        action="store_true",
        help="Reject project names that are unsafe in shell scripts or CMake",
    )
    p.add_argument("--github-token", default=None, help="GitHub token for release lookup (or set env GITHUB_TOKEN)")

    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Also log excluded entries and command output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    p.set_defaults(func=init_cmd)
    return p


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # argparse exits 2 on bad usage and 0 after --help.
        return 1 if e.code else 0
    if not args.project_name:
        parser.print_usage(sys.stderr)
        return 1

    _configure_logging(args)
    try:
        return int(args.func(args))
    except (ConfigError, ProvisionError, GitHubError, CLIError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
