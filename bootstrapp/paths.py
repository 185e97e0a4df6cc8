"""Filesystem helpers used by the instantiation pipeline.

Thin wrappers over :mod:`pathlib`, :mod:`os` and :mod:`shutil` that turn
``OSError`` into :class:`~bootstrapp.errors.FilesystemError` and add the few
operations pathlib lacks (segment-aware prefix checks, relative recursive
listings, scoped working-directory changes).
"""

from __future__ import annotations

import contextlib
import os
import shutil
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from .errors import FilesystemError


# ---------------------------------------------------------------------------
# Pure path manipulation
# ---------------------------------------------------------------------------


def normalize(path: str | PurePosixPath) -> PurePosixPath:
    """Collapse ``.`` segments and redundant separators of a relative path."""
    return PurePosixPath(os.path.normpath(str(path)))


def is_within(path: str | PurePosixPath, prefix: str | PurePosixPath) -> bool:
    """Return ``True`` if *prefix* equals *path* or is one of its parents.

    Comparison is by whole path segments, so ``Foo`` is a prefix of
    ``Foo/Bar`` but not of ``Foo2`` or ``Foo-bar``.
    """
    candidate = normalize(path)
    parent = normalize(prefix)
    return candidate == parent or parent in candidate.parents


def replace_extension(path: Path, extension: str) -> Path:
    """Swap the last suffix of *path* for *extension* (given without a dot)."""
    return path.with_suffix(f".{extension}" if extension else "")


def append_extension(path: Path, extension: str) -> Path:
    return path.with_name(f"{path.name}.{extension}")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def is_readable(path: Path) -> bool:
    return os.access(path, os.R_OK)


def recursive_contents(root: Path) -> list[PurePosixPath]:
    """List every file and directory under *root*, relative to it.

    The result is sorted so that a directory always precedes its contents.
    Symlinked directories are listed but not descended into.
    """
    if not root.is_dir():
        raise FilesystemError(f"Not a directory: {root}", root)

    entries: list[PurePosixPath] = []

    def _on_error(exc: OSError) -> None:
        raise FilesystemError(f"Cannot list {exc.filename}: {exc.strerror}", exc.filename) from exc

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        rel = Path(dirpath).relative_to(root)
        for name in dirnames + filenames:
            entries.append(PurePosixPath((rel / name).as_posix()))
    return sorted(entries)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def create_directory(path: Path) -> Path:
    """Create *path* and any missing parents."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot create directory {path}: {exc}", path) from exc
    return path


def remove(path: Path) -> None:
    """Remove a file, symlink or directory tree at *path*."""
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise FilesystemError(f"Cannot remove {path}: {exc}", path) from exc


def copy_file(source: Path, destination: Path) -> None:
    """Copy bytes and permission bits from *source* to *destination*."""
    try:
        shutil.copy2(source, destination)
    except OSError as exc:
        raise FilesystemError(f"Cannot copy {source} to {destination}: {exc}", source) from exc


def read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FilesystemError(f"Cannot read {path}: {exc}", path) from exc


def write_bytes(path: Path, data: bytes, mode_from: Path | None = None) -> None:
    """Write *data* to *path*, optionally copying permission bits from *mode_from*."""
    try:
        path.write_bytes(data)
        if mode_from is not None:
            shutil.copymode(mode_from, path)
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc}", path) from exc


@contextlib.contextmanager
def working_directory(path: Path | None) -> Iterator[None]:
    """Temporarily make *path* the process working directory.

    The previous directory is restored on exit, including when the body
    raises.  ``None`` leaves the working directory untouched.
    """
    if path is None:
        yield
        return
    previous = Path.cwd()
    try:
        os.chdir(path)
    except OSError as exc:
        raise FilesystemError(f"Cannot change directory to {path}: {exc}", path) from exc
    try:
        yield
    finally:
        os.chdir(previous)
