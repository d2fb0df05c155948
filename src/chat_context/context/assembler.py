"""Context assembly: turn workspace files into ordered context message pairs.

Each file contributes one human/assistant pair. Output order always follows
the directory listing or search-result order; concurrent reads are collected
positionally.
"""

from __future__ import annotations

import asyncio
import logging

from chat_context.config import ContextSettings
from chat_context.constants import UNIT_TEST_EXCLUDE_PATTERN
from chat_context.context.file_scanner import FileScanner
from chat_context.context.messages import (
    ContextFile,
    ContextFragment,
    ContextMessage,
    flatten_fragments,
    make_context_message_with_response,
    pair_context_messages,
)
from chat_context.context.templates import (
    populate_code_context_template,
    populate_directory_file_template,
)
from chat_context.context.test_files import (
    create_test_search_pattern,
    is_valid_test_file_name,
)
from chat_context.token_estimation import truncate_text
from chat_context.workspace.capability import Workspace
from chat_context.workspace.paths import base_name, join_uri

logger = logging.getLogger(__name__)


def _stem(file_name: str) -> str:
    """Base name up to the first dot: ``foo`` for ``src/foo.test.ts``."""
    return base_name(file_name).split(".", 1)[0]


class ContextAssembler:
    """Builds context messages for the current file, its directory and its tests."""

    def __init__(self, workspace: Workspace, settings: ContextSettings | None = None):
        self._settings = settings or ContextSettings()
        self._scanner = FileScanner(workspace, search_timeout=self._settings.search_timeout)

    async def list_directory_files(
        self, directory_uri: str, test_files_only: bool = False,
    ) -> list[tuple[str, str]]:
        return await self._scanner.list_directory_files(directory_uri, test_files_only)

    def _within_size_cap(self, size: int | None) -> bool:
        return bool(size) and size <= self._settings.max_file_size

    def _file_messages(self, text: str, uri: str) -> list[ContextMessage]:
        file_name = self._scanner.relative_path(uri)
        truncated = truncate_text(text, self._settings.max_file_tokens)
        return make_context_message_with_response(
            populate_code_context_template(truncated, file_name),
            ContextFile(file_name=file_name, uri=uri, source="file-scan"),
        )

    def _directory_file_messages(self, text: str, uri: str) -> list[ContextMessage]:
        file_name = self._scanner.relative_path(uri)
        truncated = truncate_text(text, self._settings.max_file_tokens)
        return make_context_message_with_response(
            populate_directory_file_template(truncated, file_name),
            ContextFile(file_name=file_name, uri=uri, source="file-scan"),
        )

    async def build_current_file_context(self, uri: str) -> list[ContextMessage]:
        """One pair carrying the (truncated) current file."""
        size = await self._scanner.stat_size(uri)
        if not self._within_size_cap(size):
            logger.debug("Skipping current file %s (size=%s)", uri, size)
            return []
        text = await self._scanner.decode_file(uri)
        if not text:
            return []
        return self._file_messages(text, uri)

    async def build_directory_context(
        self,
        directory_uri: str,
        current_file: str,
        *,
        exclude_current_file: bool = True,
        max_fragments: int | None = None,
    ) -> list[ContextMessage]:
        """Context pairs for the siblings of current_file in directory_uri.

        Stops as soon as a companion file (name starting or ending with the
        current file's stem) has been emitted, or after max_fragments pairs.
        """
        if max_fragments is None:
            max_fragments = self._settings.max_dir_files
        current_name = base_name(current_file)
        stem = _stem(current_name)

        entries = await self._scanner.list_directory_files(directory_uri)
        uris = [join_uri(directory_uri, name) for name, _kind in entries]
        sizes = await asyncio.gather(*(self._scanner.stat_size(uri) for uri in uris))

        messages: list[ContextMessage] = []
        for (name, _kind), uri, size in zip(entries, uris, sizes):
            if not self._within_size_cap(size):
                logger.debug("Skipping %s (size=%s)", name, size)
                continue
            if exclude_current_file and name == current_name:
                continue

            text = await self._scanner.decode_file(uri)
            if text:
                messages.extend(self._directory_file_messages(text, uri))

            if stem and (name.startswith(stem) or name.endswith(stem)):
                logger.debug("Companion file %s found for %s", name, current_name)
                return messages
            if len(messages) >= max_fragments * 2:
                return messages
        return messages

    async def build_directory_messages(
        self, directory_uri: str, entries: list[tuple[str, str]],
    ) -> list[ContextMessage]:
        """Context pairs for every listed entry, no early exit and no cap."""
        uris = [join_uri(directory_uri, name) for name, _kind in entries]
        sizes = await asyncio.gather(*(self._scanner.stat_size(uri) for uri in uris))
        kept = [uri for uri, size in zip(uris, sizes) if self._within_size_cap(size)]
        texts = await asyncio.gather(*(self._scanner.decode_file(uri) for uri in kept))

        messages: list[ContextMessage] = []
        for uri, text in zip(kept, texts):
            if text:
                messages.extend(self._directory_file_messages(text, uri))
        return messages

    async def build_test_file_context(
        self, file_name: str, unit_test_only: bool = False,
    ) -> list[ContextMessage]:
        """Context pairs for the tests of file_name.

        A test file named after file_name wins on its own; otherwise up to
        max_test_files test files from a codebase-wide search are returned.
        """
        try:
            current = await self._current_test_file_context(file_name, unit_test_only)
            if current:
                return current
            return await self._codebase_test_files_context(file_name, unit_test_only)
        except Exception as e:
            logger.warning("Test file lookup failed for %s: %s", file_name, e)
            return []

    async def _current_test_file_context(
        self, file_name: str, unit_test_only: bool,
    ) -> list[ContextMessage]:
        exclude = UNIT_TEST_EXCLUDE_PATTERN if unit_test_only else None
        pattern = create_test_search_pattern(file_name)
        found = await self._scanner.find_files(pattern, exclude, self._settings.max_test_files)
        test_uri = next((uri for uri in found if is_valid_test_file_name(base_name(uri))), None)
        if test_uri is None:
            return []
        text = await self._scanner.open_document_text(test_uri)
        if not text:
            return []
        return self._file_messages(text, test_uri)

    async def _codebase_test_files_context(
        self, file_name: str, unit_test_only: bool,
    ) -> list[ContextMessage]:
        exclude = UNIT_TEST_EXCLUDE_PATTERN if unit_test_only else None
        pattern = create_test_search_pattern(file_name, all_test_files=True)
        found = await self._scanner.find_files(pattern, exclude, self._settings.max_test_files)
        test_uris = [uri for uri in found if is_valid_test_file_name(base_name(uri))]
        texts = await asyncio.gather(*(self._scanner.decode_file(uri) for uri in test_uris))

        messages: list[ContextMessage] = []
        for uri, text in zip(test_uris, texts):
            if text:
                messages.extend(self._file_messages(text, uri))
        return messages

    async def assemble(
        self,
        uri: str,
        *,
        unit_test_only: bool = False,
        include_directory: bool = True,
    ) -> list[ContextMessage]:
        """Current file, then its tests, then its directory siblings.

        A file reached by more than one route appears once, at its first
        position.
        """
        directory_uri = uri.rstrip("/").rsplit("/", 1)[0]
        file_name = base_name(uri)

        groups = [await self.build_current_file_context(uri)]
        groups.append(await self.build_test_file_context(file_name, unit_test_only))
        if include_directory:
            groups.append(await self.build_directory_context(directory_uri, file_name))

        seen: set[str] = set()
        fragments: list[ContextFragment] = []
        for group in groups:
            for fragment in pair_context_messages(group):
                key = fragment.file.uri if fragment.file is not None else None
                if key:
                    if key in seen:
                        continue
                    seen.add(key)
                fragments.append(fragment)
        messages = flatten_fragments(fragments)
        logger.info("Assembled %d context messages for %s", len(messages), file_name)
        return messages
