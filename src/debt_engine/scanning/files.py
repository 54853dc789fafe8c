"""Workspace file discovery and per-file source loading."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from ..exceptions import FileAccessError
from .languages import detect_language

_BINARY_SNIFF_BYTES = 8192


def discover_files(workspace: Path, exclude_dirs: Iterable[str]) -> list[str]:
    """Relative POSIX paths of every scorable source file, sorted.

    Hidden directories and ``exclude_dirs`` are pruned during the walk.
    """
    root = Path(workspace).resolve()
    excluded = set(exclude_dirs)
    found: list[str] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".") and d not in excluded]
        for name in filenames:
            if name.startswith("."):
                continue
            rel = Path(dirpath, name).relative_to(root).as_posix()
            if detect_language(rel) is not None:
                found.append(rel)

    found.sort()
    return found


def relative_to_workspace(workspace: Path, file_path: str) -> str:
    """Workspace-relative POSIX path for an absolute or relative file path."""
    root = Path(workspace).resolve()
    path = Path(file_path)
    if not path.is_absolute():
        path = root / path
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        raise FileAccessError(path, "outside the workspace")


@dataclass(frozen=True)
class SourceFile:
    """Source text of one file as read at analysis time.

    For files over the size limit ``data`` only holds the leading bytes
    used for binary detection and ``line_count`` carries the line count.
    """

    path: str
    relative_path: str
    language: str
    data: bytes
    last_modified: datetime
    too_large: bool = False
    line_count: Optional[int] = None

    @property
    def is_binary(self) -> bool:
        return b"\x00" in self.data[:_BINARY_SNIFF_BYTES]

    def text(self) -> Optional[str]:
        """Decoded text, or None when the file is not valid UTF-8."""
        try:
            return self.data.decode("utf-8")
        except UnicodeDecodeError:
            return None

    @property
    def loc(self) -> int:
        """Non-blank line count."""
        if self.line_count is not None:
            return self.line_count
        return sum(1 for line in self.data.splitlines() if line.strip())


def _mtime(info: os.stat_result) -> datetime:
    return datetime.fromtimestamp(info.st_mtime, tz=timezone.utc)


def _stat_source(path: Path) -> os.stat_result:
    try:
        info = path.stat()
    except FileNotFoundError:
        raise FileAccessError(path, "file not found")
    except OSError as e:
        raise FileAccessError(path, str(e))
    if not stat.S_ISREG(info.st_mode):
        raise FileAccessError(path, "not a regular file")
    return info


def file_mtime(workspace: Path, relative_path: str) -> datetime:
    """Modification time of a workspace file, as recorded on its SourceFile.

    Raises:
        FileAccessError: If the file vanished or is not a regular file
    """
    return _mtime(_stat_source(Path(workspace).resolve() / relative_path))


def _read_head(path: Path) -> tuple[bytes, int]:
    """Leading bytes and non-blank line count, without holding the whole file."""
    with open(path, "rb") as handle:
        head = handle.read(_BINARY_SNIFF_BYTES)
        handle.seek(0)
        lines = sum(1 for line in handle if line.strip())
    return head, lines


def read_source(workspace: Path, relative_path: str, max_bytes: int) -> SourceFile:
    """Load one file.

    Files larger than ``max_bytes`` are not read into memory; only their
    leading bytes and line count are kept.

    Raises:
        FileAccessError: If the file vanished, is not a scorable source
            file, or cannot be read
    """
    path = Path(workspace).resolve() / relative_path
    language = detect_language(relative_path)
    if language is None:
        raise FileAccessError(path, "not a supported source file")
    info = _stat_source(path)
    too_large = info.st_size > max_bytes
    try:
        if too_large:
            data, line_count = _read_head(path)
        else:
            data, line_count = path.read_bytes(), None
    except FileNotFoundError:
        raise FileAccessError(path, "file not found")
    except OSError as e:
        raise FileAccessError(path, str(e))

    return SourceFile(
        path=str(path),
        relative_path=relative_path,
        language=language,
        data=data,
        last_modified=_mtime(info),
        too_large=too_large,
        line_count=line_count,
    )
