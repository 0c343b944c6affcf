"""
tree.py

Responsibility: Selectively copy a directory tree and empty a directory tree.

Rules:
- A source that cannot be listed as a directory is a silent no-op.
- Entries are visited in native listing order; nothing is sorted.
- Only directories and regular files are handled. Symlinks, devices, sockets
  and fifos are skipped without being followed.
- Files are copied as a plain byte stream; no permissions or timestamps.
- A file that cannot be opened (either side) is logged and skipped.

The remover never deletes the root it is given; the caller removes it.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024

FORMAT_ONLY = "format-only"
VENDORING = "vendoring"
POLICIES = (FORMAT_ONLY, VENDORING)


@dataclass(frozen=True)
class TreeFilter:
    """Per-entry exclusion predicate. Rules compose by logical OR."""

    excluded_names: frozenset[str] = field(default_factory=frozenset)
    excluded_substrings: tuple[str, ...] = ()

    def excludes(self, name: str) -> bool:
        if name in self.excluded_names:
            return True
        return any(s in name for s in self.excluded_substrings)

    def __or__(self, other: TreeFilter) -> TreeFilter:
        substrings = self.excluded_substrings + tuple(
            s for s in other.excluded_substrings if s not in self.excluded_substrings
        )
        return TreeFilter(
            excluded_names=self.excluded_names | other.excluded_names,
            excluded_substrings=substrings,
        )


def format_only_filter(dest: str | Path) -> TreeFilter:
    return TreeFilter(excluded_names=frozenset({os.fspath(dest)}))


def vendoring_filter(dest: str | Path) -> TreeFilter:
    return format_only_filter(dest) | TreeFilter(
        excluded_names=frozenset({"index"}),
        excluded_substrings=(".sh", ".txt"),
    )


def filter_for_policy(policy: str, dest: str | Path) -> TreeFilter:
    if policy == FORMAT_ONLY:
        return format_only_filter(dest)
    if policy == VENDORING:
        return vendoring_filter(dest)
    raise ValueError(f"Unknown filter policy {policy!r} (expected one of: {', '.join(POLICIES)})")


@dataclass
class CopyResult:
    copied_files: int = 0
    excluded_entries: int = 0
    failed_files: int = 0

    def merge(self, other: CopyResult) -> None:
        self.copied_files += other.copied_files
        self.excluded_entries += other.excluded_entries
        self.failed_files += other.failed_files


@dataclass
class RemoveResult:
    removed_files: int = 0
    removed_dirs: int = 0

    def merge(self, other: RemoveResult) -> None:
        self.removed_files += other.removed_files
        self.removed_dirs += other.removed_dirs


def copy_file(src: str | Path, dest: str | Path, *, buffer_size: int = COPY_BUFFER_SIZE) -> bool:
    """
    Stream the bytes of `src` into `dest`, creating or truncating it.

    Returns False (after logging) when either file cannot be opened.
    """
    try:
        fsrc = open(src, "rb")
    except OSError as e:
        log.warning("Skipping %s: cannot open source (%s)", src, e.strerror or e)
        return False

    with fsrc:
        try:
            fdst = open(dest, "wb")
        except OSError as e:
            log.warning("Skipping %s: cannot open destination %s (%s)", src, dest, e.strerror or e)
            return False
        with fdst:
            shutil.copyfileobj(fsrc, fdst, buffer_size)

    log.info("Copying file: %s to %s", src, dest)
    return True


def _same_path(a: Path, b: Path) -> bool:
    try:
        return a.resolve() == b.resolve()
    except OSError:
        return False


def copy_tree(src: str | Path, dest: str | Path, tree_filter: TreeFilter | None = None) -> CopyResult:
    """
    Recursively copy the entries of `src` accepted by `tree_filter` into `dest`.

    When no filter is given the format-only policy for `dest` is used. The same
    filter applies at every depth.
    """
    src_path = Path(src)
    dest_path = Path(dest)
    if tree_filter is None:
        tree_filter = format_only_filter(dest)
    return _copy_tree(src_path, dest_path, tree_filter, dest_path)


def _copy_tree(src: Path, dest: Path, tree_filter: TreeFilter, top_dest: Path) -> CopyResult:
    result = CopyResult()
    try:
        it = os.scandir(src)
    except OSError:
        log.debug("Source %s is not a readable directory; nothing to copy", src)
        return result

    with it:
        try:
            dest.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            log.warning("Skipping %s: cannot create %s (%s)", src, dest, e.strerror or e)
            return result

        for entry in it:
            if tree_filter.excludes(entry.name):
                log.debug("Excluded %s", entry.path)
                result.excluded_entries += 1
                continue

            src_entry = src / entry.name
            dest_entry = dest / entry.name

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError:
                continue

            if is_dir:
                # Never descend into the destination when it is nested in the source.
                if _same_path(src_entry, top_dest):
                    continue
                result.merge(_copy_tree(src_entry, dest_entry, tree_filter, top_dest))
            elif is_file:
                if copy_file(src_entry, dest_entry):
                    result.copied_files += 1
                else:
                    result.failed_files += 1
            else:
                log.debug("Ignoring %s: not a directory or regular file", entry.path)

    return result


def remove_tree(path: str | Path) -> RemoveResult:
    """
    Delete every regular file and directory below `path`, keeping `path`.
    """
    root = Path(path)
    result = RemoveResult()
    try:
        it = os.scandir(root)
    except OSError:
        return result

    with it:
        entries = list(it)

    for entry in entries:
        entry_path = root / entry.name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue

        if is_dir:
            result.merge(remove_tree(entry_path))
            try:
                entry_path.rmdir()
            except OSError as e:
                log.warning("Could not remove directory %s (%s)", entry_path, e.strerror or e)
                continue
            result.removed_dirs += 1
        elif is_file:
            try:
                entry_path.unlink()
            except OSError as e:
                log.warning("Could not remove %s (%s)", entry_path, e.strerror or e)
                continue
            result.removed_files += 1

    return result
