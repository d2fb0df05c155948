"""Workspace file enumeration, size checks and decoding for context retrieval.

Every failure here degrades to "less context": unreadable files decode to
an empty string, failed stats give None, and searches that error or run past
the deadline return no results.
"""

from __future__ import annotations

import asyncio
import logging

from chat_context.constants import DEFAULT_EXCLUDE_PATTERN, SEARCH_TIMEOUT_SECONDS
from chat_context.context.test_files import is_valid_test_file_name
from chat_context.workspace.capability import DIRECTORY, Workspace

logger = logging.getLogger(__name__)


class FileScanner:
    """Thin, failure-tolerant layer over a Workspace capability."""

    def __init__(self, workspace: Workspace, search_timeout: float = SEARCH_TIMEOUT_SECONDS):
        self._workspace = workspace
        self._search_timeout = search_timeout

    async def list_directory_files(
        self, directory_uri: str, test_files_only: bool = False,
    ) -> list[tuple[str, str]]:
        """List a directory, dropping sub-directories and hidden entries."""
        try:
            entries = await self._workspace.list_directory(directory_uri)
        except Exception as e:
            logger.warning("Cannot list directory %s: %s", directory_uri, e)
            return []

        files = []
        for name, kind in entries:
            if kind == DIRECTORY or name.startswith("."):
                continue
            if test_files_only and not is_valid_test_file_name(name):
                continue
            files.append((name, kind))
        return files

    async def find_files(
        self,
        pattern: str,
        exclude_pattern: str | None = None,
        max_results: int = 3,
    ) -> list[str]:
        """Search the workspace, cancelling after the search deadline."""
        excluded = exclude_pattern or DEFAULT_EXCLUDE_PATTERN
        try:
            files = await asyncio.wait_for(
                self._workspace.find_files(pattern, excluded, max_results),
                timeout=self._search_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "File search timed out after %.1fs: %s", self._search_timeout, pattern,
            )
            return []
        except Exception as e:
            logger.warning("File search failed for %s: %s", pattern, e)
            return []
        return list(files or [])

    async def stat_size(self, uri: str) -> int | None:
        try:
            stat = await self._workspace.stat_file(uri)
        except Exception as e:
            logger.warning("Cannot stat %s: %s", uri, e)
            return None
        return stat.size

    async def decode_file(self, uri: str) -> str:
        """Read a file as UTF-8, replacing undecodable bytes."""
        try:
            data = await self._workspace.read_file(uri)
        except Exception as e:
            logger.warning("Cannot read %s: %s", uri, e)
            return ""
        return data.decode("utf-8", errors="replace")

    async def open_document_text(self, uri: str) -> str:
        try:
            return await self._workspace.open_document(uri)
        except Exception as e:
            logger.warning("Cannot open document %s: %s", uri, e)
            return ""

    def relative_path(self, uri: str) -> str:
        return self._workspace.relative_path(uri)
