"""
Filesystem abstraction used to open the entry script and its includes.

All names are resolved against a single root; there is no relative path
resolution between files.
"""

from __future__ import annotations

import errno
import io
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, TextIO


class FileSystem(Protocol):
    def open(self, name: str) -> TextIO:
        """Open name for reading or raise OSError (usually FileNotFoundError)."""
        ...


class DirFS:
    """Files under a directory on disk."""

    def __init__(self, root: str | os.PathLike[str] = ".", *, encoding: str = "utf-8") -> None:
        self.root = Path(root).expanduser()
        self.encoding = encoding

    def __repr__(self) -> str:
        return f"DirFS({str(self.root)!r})"

    def open(self, name: str) -> TextIO:
        root = self.root.resolve()
        path = (root / name).resolve()
        if path != root and root not in path.parents:
            raise PermissionError(errno.EACCES, "path escapes filesystem root", name)
        return open(path, encoding=self.encoding)


class MapFS:
    """In-memory files keyed by name."""

    def __init__(self, files: Mapping[str, str | bytes] | None = None) -> None:
        self.files: dict[str, str | bytes] = dict(files or {})

    def __repr__(self) -> str:
        return f"MapFS({sorted(self.files)!r})"

    def open(self, name: str) -> TextIO:
        try:
            data = self.files[name]
        except KeyError:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), name) from None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return io.StringIO(data)
