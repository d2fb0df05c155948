"""TOML config loader and validation."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from chat_context.constants import (
    CONFIG_RELPATH,
    DEFAULT_IGNORE_FILE,
    MAX_CURRENT_FILE_TOKENS,
    MAX_DIR_FILES,
    MAX_FILE_SIZE,
    MAX_TEST_FILE_RESULTS,
    SEARCH_TIMEOUT_SECONDS,
)


@dataclass(frozen=True)
class ContextSettings:
    """Limits applied by the context assembler."""
    max_file_tokens: int = MAX_CURRENT_FILE_TOKENS
    max_dir_files: int = MAX_DIR_FILES
    max_test_files: int = MAX_TEST_FILE_RESULTS
    search_timeout: float = SEARCH_TIMEOUT_SECONDS
    max_file_size: int = MAX_FILE_SIZE
    ignore_file: str = DEFAULT_IGNORE_FILE

    def __post_init__(self):
        if self.max_file_tokens <= 0:
            raise ValueError(f"max_file_tokens must be > 0, got {self.max_file_tokens}")
        if self.max_dir_files <= 0:
            raise ValueError(f"max_dir_files must be > 0, got {self.max_dir_files}")
        if self.max_test_files <= 0:
            raise ValueError(f"max_test_files must be > 0, got {self.max_test_files}")
        if self.search_timeout <= 0:
            raise ValueError(f"search_timeout must be > 0, got {self.search_timeout}")
        if self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be > 0, got {self.max_file_size}")
        if not self.ignore_file:
            raise ValueError("ignore_file must be non-empty")


_INIT_HINT = "Run 'chatctx init' to create a default config."


def config_path(root: Path) -> Path:
    return root / CONFIG_RELPATH


def load_config(root: Path) -> dict | None:
    """Parsed config.toml under root, or None when the project has none."""
    try:
        with open(config_path(root), "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return None


def require_config_section(config: dict | None, section: str) -> dict:
    """Return ``[section]`` as a table. A missing config or section is a hard error."""
    if config is None:
        raise RuntimeError(f"No {CONFIG_RELPATH} found. {_INIT_HINT}")
    value = config.get(section)
    if not isinstance(value, dict):
        found = "nothing" if value is None else f"a {type(value).__name__}"
        raise RuntimeError(
            f"[{section}] in {CONFIG_RELPATH} must be a table, found {found}. {_INIT_HINT}"
        )
    return value


_SETTINGS_KEYS = {
    "max_file_tokens": int,
    "max_dir_files": int,
    "max_test_files": int,
    "search_timeout": (int, float),
    "max_file_size": int,
}


def load_context_settings(config: dict | None) -> ContextSettings:
    """Build ContextSettings from the optional [context] and [ignore] sections.

    Both sections are optional; absent keys keep their defaults. Present keys
    must have the right type.
    """
    if config is None:
        return ContextSettings()

    kwargs: dict = {}
    if "context" in config:
        section = require_config_section(config, "context")
        unknown = set(section) - set(_SETTINGS_KEYS)
        if unknown:
            raise ValueError(
                f"Unknown keys in [context] config: {', '.join(sorted(unknown))}"
            )
        for key, expected in _SETTINGS_KEYS.items():
            if key not in section:
                continue
            value = section[key]
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ValueError(
                    f"[context].{key} must be a number, got {value!r}"
                )
            kwargs[key] = value

    if "ignore" in config:
        ignore = require_config_section(config, "ignore")
        if "file" in ignore:
            kwargs["ignore_file"] = ignore["file"]

    return ContextSettings(**kwargs)


def create_default_config(root: Path) -> Path:
    """Create a default config.toml and an empty ignore file. Returns the config path."""
    path = config_path(root)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        raise FileExistsError(f"Config already exists: {path}")
    path.write_text(
        '[context]\n'
        f'max_file_tokens = {MAX_CURRENT_FILE_TOKENS}\n'
        f'max_dir_files = {MAX_DIR_FILES}\n'
        f'max_test_files = {MAX_TEST_FILE_RESULTS}\n'
        '# Pattern searches are cancelled after this many seconds\n'
        f'search_timeout = {SEARCH_TIMEOUT_SECONDS}\n'
        '# Files above this size (bytes) are never read\n'
        f'max_file_size = {MAX_FILE_SIZE}\n'
        '\n'
        '[ignore]\n'
        '# gitignore-style rules; matching files never reach the model\n'
        f'file = "{DEFAULT_IGNORE_FILE}"\n'
    )
    ignore_path = root / DEFAULT_IGNORE_FILE
    if not ignore_path.exists():
        ignore_path.write_text("# Paths listed here are excluded from chat context\n")
    return path
