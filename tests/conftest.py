"""Shared test fixtures."""

import asyncio
from urllib.parse import quote, unquote

import pytest

from chat_context.workspace.capability import DIRECTORY, FILE, FileStat
from chat_context.workspace.globs import compile_glob


class FakeWorkspace:
    """In-memory workspace keyed by relative path.

    Directory listings and search results follow insertion order of ``files``
    so tests control scan order exactly.
    """

    def __init__(
        self,
        files,
        *,
        root="/ws",
        sizes=None,
        fail_reads=(),
        fail_stats=(),
        search_delay=0.0,
        open_documents=None,
    ):
        self.root = root
        self.files = {
            rel: content.encode("utf-8") if isinstance(content, str) else content
            for rel, content in files.items()
        }
        self.sizes = dict(sizes or {})
        self.fail_reads = set(fail_reads)
        self.fail_stats = set(fail_stats)
        self.search_delay = search_delay
        self.open_documents = dict(open_documents or {})
        self.find_calls = []
        self.reads = []

    def uri(self, rel):
        return f"file://{self.root}/{quote(rel)}"

    def _rel(self, uri):
        base = f"file://{self.root}"
        if uri.rstrip("/") == base:
            return ""
        if not uri.startswith(base + "/"):
            raise FileNotFoundError(uri)
        return unquote(uri[len(base) + 1:])

    async def read_file(self, uri):
        rel = self._rel(uri)
        self.reads.append(rel)
        if rel in self.fail_reads:
            raise OSError(f"read failed: {rel}")
        if rel not in self.files:
            raise FileNotFoundError(rel)
        return self.files[rel]

    async def stat_file(self, uri):
        rel = self._rel(uri)
        if rel in self.fail_stats:
            raise OSError(f"stat failed: {rel}")
        if rel not in self.files:
            raise FileNotFoundError(rel)
        return FileStat(size=self.sizes.get(rel, len(self.files[rel])), kind=FILE)

    async def list_directory(self, uri):
        rel_dir = self._rel(uri)
        prefix = f"{rel_dir}/" if rel_dir else ""
        entries = []
        seen = set()
        for rel in self.files:
            if not rel.startswith(prefix):
                continue
            rest = rel[len(prefix):]
            name, sep, _ = rest.partition("/")
            if name in seen:
                continue
            seen.add(name)
            entries.append((name, DIRECTORY if sep else FILE))
        return entries

    async def find_files(self, pattern, exclude_pattern, max_results):
        self.find_calls.append((pattern, exclude_pattern, max_results))
        if self.search_delay:
            await asyncio.sleep(self.search_delay)
        include = compile_glob(pattern)
        exclude = compile_glob(exclude_pattern) if exclude_pattern else None
        results = []
        for rel in self.files:
            if not include.match_file(rel):
                continue
            if exclude is not None and exclude.match_file(rel):
                continue
            results.append(self.uri(rel))
            if len(results) >= max_results:
                break
        return results

    async def open_document(self, uri):
        if uri in self.open_documents:
            return self.open_documents[uri]
        return (await self.read_file(uri)).decode("utf-8")

    def relative_path(self, uri):
        return self._rel(uri)


@pytest.fixture
def fake_workspace():
    """Factory for FakeWorkspace instances."""
    return FakeWorkspace


@pytest.fixture
def tmp_workspace(tmp_path):
    """A directory on disk acting as a workspace root, plus a file writer."""
    def write(rel, content=""):
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return tmp_path, write
