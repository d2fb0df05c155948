"""Filesystem-backed workspace capability."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from pathlib import Path

from chat_context.workspace.capability import DIRECTORY, FILE, SYMLINK, FileStat
from chat_context.workspace.globs import compile_glob
from chat_context.workspace.paths import path_from_uri, uri_from_path

logger = logging.getLogger(__name__)


class LocalWorkspace:
    """Workspace rooted at a directory on disk.

    Blocking filesystem calls run in worker threads so callers can keep many
    reads in flight. ``open_documents`` maps URIs to unsaved editor buffers;
    ``open_document`` prefers them over the file on disk.
    """

    def __init__(self, root: Path, open_documents: dict[str, str] | None = None):
        self._root = Path(root).resolve()
        self._open_documents = dict(open_documents or {})

    def uri_for(self, relative: str) -> str:
        return uri_from_path(self._root / relative)

    def _path(self, uri: str) -> Path:
        path = path_from_uri(uri)
        if path is None:
            raise ValueError(f"Not a file URI: {uri!r}")
        return path

    async def read_file(self, uri: str) -> bytes:
        return await asyncio.to_thread(self._path(uri).read_bytes)

    async def stat_file(self, uri: str) -> FileStat:
        path = self._path(uri)
        st = await asyncio.to_thread(path.stat)
        kind = DIRECTORY if path.is_dir() else FILE
        return FileStat(size=st.st_size, kind=kind)

    async def list_directory(self, uri: str) -> list[tuple[str, str]]:
        return await asyncio.to_thread(self._list_directory, self._path(uri))

    def _list_directory(self, path: Path) -> list[tuple[str, str]]:
        entries = []
        for entry in sorted(os.scandir(path), key=lambda e: e.name):
            if entry.is_symlink():
                kind = SYMLINK
            elif entry.is_dir():
                kind = DIRECTORY
            else:
                kind = FILE
            entries.append((entry.name, kind))
        return entries

    async def find_files(
        self, pattern: str, exclude_pattern: str | None, max_results: int,
    ) -> list[str]:
        stop = threading.Event()
        try:
            return await asyncio.to_thread(
                self._find_files, pattern, exclude_pattern, max_results, stop,
            )
        except asyncio.CancelledError:
            stop.set()
            raise

    def _find_files(
        self,
        pattern: str,
        exclude_pattern: str | None,
        max_results: int,
        stop: threading.Event,
    ) -> list[str]:
        include = compile_glob(pattern)
        exclude = compile_glob(exclude_pattern) if exclude_pattern else None
        results: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            if stop.is_set():
                logger.debug("find_files cancelled after %d results: %s", len(results), pattern)
                break
            dirnames.sort()
            current = Path(dirpath)
            for name in sorted(filenames):
                rel = (current / name).relative_to(self._root).as_posix()
                if not include.match_file(rel):
                    continue
                if exclude is not None and exclude.match_file(rel):
                    continue
                results.append(uri_from_path(current / name))
                if len(results) >= max_results:
                    return results
        return results

    async def open_document(self, uri: str) -> str:
        if uri in self._open_documents:
            return self._open_documents[uri]
        data = await self.read_file(uri)
        return data.decode("utf-8")

    def relative_path(self, uri: str) -> str:
        path = path_from_uri(uri)
        if path is None:
            return uri
        try:
            return path.relative_to(self._root).as_posix()
        except ValueError:
            return path.as_posix()
