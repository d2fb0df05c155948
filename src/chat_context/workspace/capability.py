"""The workspace capability set consumed by the context pipeline.

Editors, test doubles and the local filesystem all provide the same narrow
interface, passed explicitly to the scanner and assembler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

FILE = "file"
DIRECTORY = "directory"
SYMLINK = "symlink"


@dataclass(frozen=True)
class FileStat:
    size: int
    kind: str = FILE


@runtime_checkable
class Workspace(Protocol):
    """Async file access for one workspace. URIs are ``file://`` strings.

    Implementations may raise any exception for a file or search that fails;
    the scanner logs it and carries on with less context.
    """

    async def read_file(self, uri: str) -> bytes: ...

    async def stat_file(self, uri: str) -> FileStat: ...

    async def list_directory(self, uri: str) -> list[tuple[str, str]]:
        """Return ``(name, kind)`` entries in the listing's own order."""
        ...

    async def find_files(
        self, pattern: str, exclude_pattern: str | None, max_results: int,
    ) -> list[str]:
        """Return URIs of workspace files matching a glob, at most max_results."""
        ...

    async def open_document(self, uri: str) -> str: ...

    def relative_path(self, uri: str) -> str: ...
