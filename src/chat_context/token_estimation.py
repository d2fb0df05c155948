"""Token estimation and budget truncation for context excerpts.

All budgets in this package are expressed in tokens and converted to
characters with a single ratio, so the truncator and the estimator always
agree: a text truncated to ``n`` tokens never estimates above ``n``.
Zero internal imports, safe to import from any layer.
"""

import logging

logger = logging.getLogger(__name__)

# Planning estimate: ~4 chars per token.
CHARS_PER_TOKEN = 4


def tokens_to_chars(tokens: int) -> int:
    """Convert a token budget to a character budget."""
    return tokens * CHARS_PER_TOKEN


def estimate_tokens(text: str) -> int:
    """Estimate token count, rounding partial tokens up."""
    return -(-len(text) // CHARS_PER_TOKEN)


def truncate_text(text: str, max_tokens: int, *, keep: str = "head") -> str:
    """Clip text to at most ``max_tokens`` tokens.

    Returns ``text`` unchanged when it already fits. ``keep="head"`` keeps a
    prefix, ``keep="tail"`` keeps a suffix. Truncation is idempotent.

    Raises:
        ValueError: If max_tokens is negative or keep is unknown.
    """
    if max_tokens < 0:
        raise ValueError(f"max_tokens must be >= 0, got {max_tokens}")
    if keep not in ("head", "tail"):
        raise ValueError(f"keep must be 'head' or 'tail', got {keep!r}")

    max_chars = tokens_to_chars(max_tokens)
    if len(text) <= max_chars:
        return text

    logger.debug(
        "truncate_text: %d chars clipped to %d (keep=%s, max_tokens=%d)",
        len(text), max_chars, keep, max_tokens,
    )
    if keep == "tail":
        return text[len(text) - max_chars:]
    return text[:max_chars]
