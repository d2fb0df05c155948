"""Ignore rules: files that must never be surfaced as chat context."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

import pathspec

from chat_context.workspace.paths import path_from_uri

logger = logging.getLogger(__name__)


class IgnoreFilter:
    """Pure predicate over a gitignore-style rule set for one workspace.

    ``root`` is the workspace root the rules are relative to. ``repo_name``
    names the repository the rules belong to; repo-relative checks for other
    repositories never match.
    """

    def __init__(self, root: Path, spec: pathspec.PathSpec | None, repo_name: str | None = None):
        self._root = Path(root).resolve()
        self._spec = spec
        self._repo_name = repo_name

    @classmethod
    def empty(cls) -> IgnoreFilter:
        return cls(Path("/"), None)

    @classmethod
    def from_lines(cls, root: Path, lines: list[str], repo_name: str | None = None) -> IgnoreFilter:
        return cls(root, pathspec.PathSpec.from_lines("gitwildmatch", lines), repo_name)

    @classmethod
    def load(cls, root: Path, ignore_file: str, repo_name: str | None = None) -> IgnoreFilter:
        """Parse the ignore file relative to root. A missing file ignores nothing."""
        path = Path(root) / ignore_file
        if not path.is_file():
            logger.debug("No ignore file at %s", path)
            return cls(root, None, repo_name)
        text = path.read_text(encoding="utf-8", errors="replace")
        return cls.from_lines(root, text.splitlines(), repo_name)

    @property
    def repo_name(self) -> str | None:
        return self._repo_name

    def is_ignored(self, uri: str) -> bool:
        """True if the file URI (or absolute path) falls under an ignore rule."""
        if self._spec is None:
            return False
        path = path_from_uri(uri)
        if path is None:
            return False
        try:
            rel = path.relative_to(self._root)
        except ValueError:
            return False
        return self._match(rel.as_posix())

    def is_ignored_path(self, repo_name: str, file_name: str) -> bool:
        """True if a repo-relative path is ignored for the given repository."""
        if self._spec is None:
            return False
        if self._repo_name is not None and repo_name != self._repo_name:
            return False
        rel = PurePosixPath(file_name.replace("\\", "/").lstrip("/")).as_posix()
        return self._match(rel)

    def _match(self, rel: str) -> bool:
        if rel in ("", "."):
            return False
        return self._spec.match_file(rel)
