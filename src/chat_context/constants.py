"""Centralized limits and file extension constants."""

# Files larger than this are never read for context (hard cap, bytes).
MAX_FILE_SIZE = 1_000_000

# Token budget for a single file excerpt.
MAX_CURRENT_FILE_TOKENS = 1000

# Sibling files read by the directory scan before it stops.
MAX_DIR_FILES = 5

# Test files returned by a codebase-wide search.
MAX_TEST_FILE_RESULTS = 5

# Every workspace pattern search is cancelled after this many seconds.
SEARCH_TIMEOUT_SECONDS = 20.0

DEFAULT_EXCLUDE_PATTERN = "**/{.*,node_modules,snap*}/**"
UNIT_TEST_EXCLUDE_PATTERN = "**/*{e2e,integration,node_modules}*/**"

CONFIG_DIR = ".chat_context"
CONFIG_FILE = "config.toml"
CONFIG_RELPATH = f"{CONFIG_DIR}/{CONFIG_FILE}"
DEFAULT_IGNORE_FILE = f"{CONFIG_DIR}/ignore"
GITIGNORE_ENTRY = f"{CONFIG_DIR}/"

LANGUAGE_MAP: dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".rb": "ruby",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".md": "markdown",
}


def language_from_extension(file_path: str) -> str:
    """Map a file path to a markdown fence language, or "" if unknown."""
    for ext, lang in LANGUAGE_MAP.items():
        if file_path.endswith(ext):
            return lang
    return ""
