"""Small formatting helpers for chat panels and context ranges."""

import re

from chat_context.context.messages import Position, Range

DEFAULT_CHAT_TITLE = "New Chat"
MAX_TITLE_LENGTH = 25

# [_@file.ts_](file.ts) -> @file.ts
_MARKDOWN_FILE_LINK_RE = re.compile(r"\[_(.+?)_\]\((.+?)\)")
_FRAGMENT_RE = re.compile(r"^L(\d+)-(\d+)$")


def get_chat_panel_title(last_display_text: str | None = None, truncate_title: bool = True) -> str:
    """Title for a chat panel from the last human display text."""
    if not last_display_text:
        return DEFAULT_CHAT_TITLE
    title = _MARKDOWN_FILE_LINK_RE.sub(r"\1", last_display_text).strip()
    if not truncate_title or len(title) <= MAX_TITLE_LENGTH:
        return title
    return title[:MAX_TITLE_LENGTH].rstrip() + "..."


def range_to_fragment(range_: Range) -> str:
    return f"L{range_.start.line}-{range_.end.line}"


def fragment_to_range(fragment: str) -> Range | None:
    """Parse ``L<start>-<end>``; anything else gives None."""
    match = _FRAGMENT_RE.match(fragment)
    if not match:
        return None
    return Range(
        start=Position(line=int(match.group(1))),
        end=Position(line=int(match.group(2))),
    )
