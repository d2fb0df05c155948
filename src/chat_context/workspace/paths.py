"""File URI helpers."""

from pathlib import Path
from urllib.parse import quote, unquote, urlparse


def uri_from_path(path: Path) -> str:
    return Path(path).resolve().as_uri()


def path_from_uri(uri: str) -> Path | None:
    """Resolve a ``file://`` URI or a plain absolute path. Other schemes give None."""
    if uri.startswith("file://"):
        parsed = urlparse(uri)
        return Path(unquote(parsed.path)).resolve()
    if "://" in uri:
        return None
    path = Path(uri)
    if not path.is_absolute():
        return None
    return path.resolve()


def base_name(uri_or_path: str) -> str:
    """Last path segment of a URI or path."""
    name = uri_or_path.rstrip("/").rsplit("/", 1)[-1]
    if "://" in uri_or_path:
        return unquote(name)
    return name


def join_uri(directory_uri: str, name: str) -> str:
    """Append a file name to a directory URI."""
    return directory_uri.rstrip("/") + "/" + quote(name)
