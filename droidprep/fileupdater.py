"""Idempotent file synchronization primitive.

All paths handed to these helpers are relative to ``root_dir``. A target
mapped to ``None`` is deleted if present. Files are only rewritten when their
content differs from the source (or when ``all`` is set), so running the same
update twice is a no-op the second time.
"""

from __future__ import annotations

import filecmp
import fnmatch
import os
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

from .errors import FileSyncError
from .events import Diagnostics

SyncMap = Mapping[str, Optional[str]]


def _full(root_dir: Path | str | None, rel: str) -> Path:
    return Path(root_dir or "") / rel


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _update_path_with_stats(
    source: Optional[str],
    target: str,
    root_dir: Path | str | None,
    copy_all: bool,
    diag: Diagnostics,
) -> bool:
    updated = False
    target_full = _full(root_dir, target)
    target_exists = target_full.exists()

    if source is not None:
        source_full = _full(root_dir, source)
        source_is_dir = source_full.is_dir()
        if target_exists and target_full.is_dir() != source_is_dir:
            # Target exists with the wrong kind; replace it.
            diag.file_op(f"delete {target}")
            _remove(target_full)
            target_exists = False
            updated = True

        if not target_exists:
            if source_is_dir:
                diag.file_op(f"mkdir {target}")
                target_full.mkdir(parents=True, exist_ok=True)
            else:
                diag.file_op(f"copy  {source} {target}")
                target_full.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source_full, target_full)
            updated = True
        elif not source_is_dir:
            if copy_all or not filecmp.cmp(source_full, target_full, shallow=False):
                diag.file_op(f"copy  {source} {target}")
                shutil.copyfile(source_full, target_full)
                updated = True
    elif target_exists:
        diag.file_op(f"delete {target}" + ("" if copy_all else " (no source)"))
        _remove(target_full)
        updated = True

    return updated


def update_path(
    source: Optional[str],
    target: str,
    *,
    root_dir: Path | str | None = None,
    all: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Bring *target* in line with *source*; ``None`` deletes the target.

    Raises:
        FileSyncError: the source is given but does not exist.
    """
    diag = diagnostics or Diagnostics(__name__)
    if source is not None and not _full(root_dir, source).exists():
        raise FileSyncError(f"Source path does not exist: {source}")
    return _update_path_with_stats(source, target, root_dir, all, diag)


def update_paths(
    path_map: SyncMap,
    *,
    root_dir: Path | str | None = None,
    all: bool = False,
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Apply :func:`update_path` to every target in *path_map*.

    Returns True if any file was copied, created or deleted.
    """
    diag = diagnostics or Diagnostics(__name__)
    updated = False
    for target in sorted(path_map):
        if update_path(path_map[target], target, root_dir=root_dir, all=all, diagnostics=diag):
            updated = True
    return updated


def _matches(rel: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(rel, p) or fnmatch.fnmatchcase(os.path.basename(rel), p) for p in patterns)


def _map_directory(
    root_dir: Path | str | None,
    sub_dir: str,
    include: Sequence[str],
    exclude: Sequence[str],
) -> dict[str, str]:
    """Map every entry below *sub_dir* as ``relative path -> sub_dir``."""
    base = _full(root_dir, sub_dir)
    entries: dict[str, str] = {}
    if not base.exists():
        return entries
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        rel_dir = Path(dirpath).relative_to(base)
        for name in dirnames + sorted(filenames):
            rel = (rel_dir / name).as_posix()
            if exclude and _matches(rel, exclude):
                continue
            if name in filenames and not _matches(rel, include):
                continue
            entries[rel] = sub_dir
    return entries


def merge_and_update_dir(
    source_dirs: Sequence[str],
    target_dir: str,
    *,
    root_dir: Path | str | None = None,
    all: bool = False,
    include: Sequence[str] = ("*",),
    exclude: Sequence[str] = (),
    diagnostics: Optional[Diagnostics] = None,
) -> bool:
    """Merge *source_dirs* (later ones win) into *target_dir*.

    Anything under the target that no source provides is deleted, so an
    empty *source_dirs* clears the target directory.

    Raises:
        FileSyncError: a source directory does not exist.
    """
    diag = diagnostics or Diagnostics(__name__)
    for source_dir in source_dirs:
        if not _full(root_dir, source_dir).is_dir():
            raise FileSyncError(f"Source directory does not exist: {source_dir}")

    target_entries = _map_directory(root_dir, target_dir, include, exclude)
    merged: dict[str, Optional[str]] = {rel: None for rel in target_entries}
    for source_dir in source_dirs:
        for rel, sub_dir in _map_directory(root_dir, source_dir, include, exclude).items():
            merged[rel] = sub_dir

    if not _full(root_dir, target_dir).exists() and source_dirs:
        diag.file_op(f"mkdir {target_dir}")
        _full(root_dir, target_dir).mkdir(parents=True, exist_ok=True)

    updated = False
    # Parents sort before their children.
    for rel in sorted(merged):
        target = f"{target_dir}/{rel}"
        sub_dir = merged[rel]
        source = f"{sub_dir}/{rel}" if sub_dir is not None else None
        if source is None and not _full(root_dir, target).exists():
            # Already gone with a deleted parent directory.
            continue
        if _update_path_with_stats(source, target, root_dir, all, diag):
            updated = True
    return updated
