from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from raylib_init.tree import (
    CopyResult,
    TreeFilter,
    copy_file,
    copy_tree,
    filter_for_policy,
    format_only_filter,
    remove_tree,
    vendoring_filter,
)

needs_symlinks = pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")


def _make_source(root: Path) -> Path:
    src = root / "source"
    (src / "sub").mkdir(parents=True)
    (src / "a.c").write_text("int a;\n", encoding="utf-8")
    (src / "readme.txt").write_text("docs\n", encoding="utf-8")
    (src / "setup.sh").write_text("#!/bin/sh\n", encoding="utf-8")
    (src / "index").write_text("index\n", encoding="utf-8")
    (src / "sub" / "b.c").write_text("int b;\n", encoding="utf-8")
    return src


def test_vendoring_policy_excludes_at_every_depth(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    (src / "sub" / "notes.txt").write_text("x", encoding="utf-8")
    (src / "sub" / "index").write_text("x", encoding="utf-8")
    (src / "sub" / "run.sh").write_text("x", encoding="utf-8")
    dest = tmp_path / "out"

    result = copy_tree(src, dest, vendoring_filter(dest))

    assert files_under(dest) == {"a.c", "sub/b.c"}
    assert result.copied_files == 2
    assert result.failed_files == 0
    assert result.excluded_entries == 6


def test_format_only_policy_copies_everything(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    dest = tmp_path / "out"

    copy_tree(src, dest, format_only_filter(dest))

    assert files_under(dest) == {"a.c", "readme.txt", "setup.sh", "index", "sub/b.c"}


def test_default_filter_is_format_only(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    dest = tmp_path / "out"

    copy_tree(src, dest)

    assert "readme.txt" in files_under(dest)


def test_format_only_excludes_literal_destination_name(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    (src / "build").mkdir()
    (src / "build" / "stale.o").write_bytes(b"\x00")

    copy_tree(src, tmp_path / "other", format_only_filter("build"))

    assert "build/stale.o" not in files_under(tmp_path / "other")


def test_copy_is_byte_exact(tmp_path: Path):
    src = tmp_path / "src"
    src.mkdir()
    payload = os.urandom(10_000) + b"\r\n\x00tail"
    (src / "blob.bin").write_bytes(payload)
    (src / "empty").write_bytes(b"")

    copy_tree(src, tmp_path / "dest")

    copied = tmp_path / "dest" / "blob.bin"
    assert copied.read_bytes() == payload
    assert copied.stat().st_size == len(payload)
    assert (tmp_path / "dest" / "empty").read_bytes() == b""


def test_missing_source_is_a_noop(tmp_path: Path):
    dest = tmp_path / "dest"

    result = copy_tree(tmp_path / "nonexistent", dest, vendoring_filter(dest))

    assert result == CopyResult()
    assert not dest.exists()


def test_source_that_is_a_file_is_a_noop(tmp_path: Path):
    src = tmp_path / "file"
    src.write_text("x", encoding="utf-8")

    result = copy_tree(src, tmp_path / "dest")

    assert result.copied_files == 0
    assert not (tmp_path / "dest").exists()


def test_existing_destination_is_reused(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    dest = tmp_path / "dest"
    dest.mkdir()
    (dest / "keep.c").write_text("keep", encoding="utf-8")
    (dest / "a.c").write_text("old contents that are longer", encoding="utf-8")

    copy_tree(src, dest, vendoring_filter(dest))

    assert files_under(dest) == {"keep.c", "a.c", "sub/b.c"}
    assert (dest / "a.c").read_text(encoding="utf-8") == "int a;\n"


def test_destination_open_failure_is_skipped(tmp_path: Path, files_under, caplog):
    src = _make_source(tmp_path)
    dest = tmp_path / "dest"
    # A directory where the file should go cannot be opened for writing.
    (dest / "a.c").mkdir(parents=True)

    with caplog.at_level("WARNING", logger="raylib_init.tree"):
        result = copy_tree(src, dest, vendoring_filter(dest))

    assert result.failed_files == 1
    assert result.copied_files == 1
    assert files_under(dest) == {"sub/b.c"}
    assert "cannot open destination" in caplog.text


def test_copy_file_missing_source_returns_false(tmp_path: Path):
    assert copy_file(tmp_path / "missing", tmp_path / "out") is False
    assert not (tmp_path / "out").exists()


def test_copy_file_small_buffer(tmp_path: Path):
    (tmp_path / "in").write_bytes(b"abcdefghij" * 7)

    assert copy_file(tmp_path / "in", tmp_path / "out", buffer_size=3) is True
    assert (tmp_path / "out").read_bytes() == b"abcdefghij" * 7


@needs_symlinks
def test_symlinks_are_not_copied_or_followed(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.c").write_text("x", encoding="utf-8")
    os.symlink(outside, src / "linked_dir")
    os.symlink(src / "a.c", src / "linked.c")
    dest = tmp_path / "dest"

    copy_tree(src, dest)

    copied = files_under(dest)
    assert "linked.c" not in copied
    assert not any(p.startswith("linked_dir") for p in copied)


def test_destination_nested_in_source_is_not_recursed(tmp_path: Path, files_under):
    src = _make_source(tmp_path)
    dest = src / "vendor"

    copy_tree(src, dest, vendoring_filter(dest))

    assert files_under(dest) == {"a.c", "sub/b.c"}


def test_filters_compose_with_or():
    combined = TreeFilter(excluded_names=frozenset({"index"})) | TreeFilter(excluded_substrings=(".sh",))

    assert combined.excludes("index")
    assert combined.excludes("build.sh")
    assert combined.excludes("x.sh.in")
    assert not combined.excludes("main.c")


def test_vendoring_filter_matches_substrings_anywhere():
    f = vendoring_filter("deps/raylib/src")

    assert f.excludes("CMakeLists.txt")
    assert f.excludes("notes.txt.bak")
    assert f.excludes("deps/raylib/src")
    assert not f.excludes("indexer.c")


def test_filter_for_policy():
    assert filter_for_policy("format-only", "out") == format_only_filter("out")
    assert filter_for_policy("vendoring", "out") == vendoring_filter("out")
    with pytest.raises(ValueError):
        filter_for_policy("everything", "out")


def _make_tree(root: Path) -> None:
    (root / "a" / "b").mkdir(parents=True)
    (root / "top.txt").write_text("x", encoding="utf-8")
    (root / "a" / "mid.c").write_text("x", encoding="utf-8")
    (root / "a" / "b" / "deep.h").write_text("x", encoding="utf-8")
    (root / "empty").mkdir()


def test_remove_tree_leaves_root_intact(tmp_path: Path):
    root = tmp_path / "clone"
    _make_tree(root)

    result = remove_tree(root)

    assert root.is_dir()
    assert list(root.iterdir()) == []
    assert result.removed_files == 3
    assert result.removed_dirs == 3


def test_remove_tree_is_idempotent(tmp_path: Path):
    root = tmp_path / "clone"
    _make_tree(root)

    remove_tree(root)
    second = remove_tree(root)

    assert root.is_dir()
    assert list(root.iterdir()) == []
    assert second.removed_files == 0
    assert second.removed_dirs == 0


def test_remove_tree_missing_path_is_a_noop(tmp_path: Path):
    result = remove_tree(tmp_path / "nonexistent")

    assert result.removed_files == 0
    assert not (tmp_path / "nonexistent").exists()


def test_remove_tree_handles_read_only_files(tmp_path: Path):
    root = tmp_path / "clone"
    (root / ".git" / "objects").mkdir(parents=True)
    obj = root / ".git" / "objects" / "pack"
    obj.write_bytes(b"\x00")
    obj.chmod(0o444)

    remove_tree(root)

    if sys.platform != "win32":
        assert list(root.iterdir()) == []


@needs_symlinks
def test_remove_tree_does_not_follow_symlinks(tmp_path: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "keep.c").write_text("x", encoding="utf-8")
    root = tmp_path / "clone"
    root.mkdir()
    os.symlink(outside, root / "link")

    remove_tree(root)

    assert (outside / "keep.c").exists()
    assert (root / "link").is_symlink()


def test_each_copied_file_is_logged(tmp_path: Path, caplog):
    (tmp_path / "in").write_bytes(b"x")

    with caplog.at_level("INFO", logger="raylib_init.tree"):
        copy_file(tmp_path / "in", tmp_path / "out")

    assert f"Copying file: {tmp_path / 'in'} to {tmp_path / 'out'}" in caplog.text
