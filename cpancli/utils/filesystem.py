"""
Filesystem utilities for cpancli.

Helpers for reading configuration files, writing configuration dumps
atomically and discovering module source files below a search-path
directory. All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Iterator, Optional, Union

from cpancli.utils.logger import get_logger
from cpancli.exceptions import FileOperationError
from cpancli.constants import MAX_FILE_SIZE, MODULE_FILE_PATTERN


logger = get_logger("filesystem")

PathLike = Union[str, Path]

_MODULE_FILE_RE = re.compile(MODULE_FILE_PATTERN)


def _validated_file(path: Path) -> Path:
    """Check that ``path`` is an existing regular file and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing anything larger than ``max_size`` bytes.

    Undecodable bytes are replaced rather than failing the read, since
    Perl sources and configuration files are not always UTF-8.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding, errors="replace")
    except OSError as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup: bool = True,
) -> Optional[Path]:
    """Atomically replace ``file_path`` with ``content``.

    When the target already exists and ``create_backup`` is set, the old
    contents are kept next to it with a ``.bak`` suffix.

    Returns:
        Path to the backup, if one was made.
    """
    path = Path(file_path)
    backup: Optional[Path] = None

    if create_backup and path.is_file():
        backup = path.with_name(path.name + ".bak")
        try:
            shutil.copy2(path, backup)
        except OSError as exc:
            raise FileOperationError(
                f"Failed to create backup: {exc}",
                file_path=str(path),
                operation="backup",
                original_error=exc,
            ) from exc
        logger.debug("Backed up %s to %s", path, backup)

    _atomic_write(path, content)
    return backup


def iter_module_files(root: PathLike) -> Iterator[Path]:
    """Yield module source files (``Name.pm``) below ``root``.

    Directories are visited in sorted order and symlinked directories are
    not followed. A missing or unreadable ``root`` yields nothing.
    """
    base = Path(root)
    if not base.is_dir():
        logger.debug("Skipping missing search path entry: %s", base)
        return

    for dirpath, dirnames, filenames in os.walk(base, onerror=_log_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            if _MODULE_FILE_RE.match(name):
                yield Path(os.path.normpath(os.path.join(dirpath, name)))


def _log_walk_error(exc: OSError) -> None:
    logger.debug("Cannot read directory %s: %s", exc.filename, exc)
