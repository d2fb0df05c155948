"""Workspace glob patterns: brace alternation on top of gitwildmatch."""

import pathspec


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternation, innermost-first, preserving order.

    Unbalanced braces are left as literal text.
    """
    close = pattern.find("}")
    if close == -1:
        return [pattern]
    open_ = pattern.rfind("{", 0, close)
    if open_ == -1:
        return [pattern]

    head, body, tail = pattern[:open_], pattern[open_ + 1:close], pattern[close + 1:]
    expanded: list[str] = []
    for option in body.split(","):
        for result in expand_braces(head + option + tail):
            if result not in expanded:
                expanded.append(result)
    return expanded


def compile_glob(pattern: str) -> pathspec.PathSpec:
    """Compile a workspace glob (relative, forward-slash paths) into a PathSpec.

    A leading ``/`` anchors the pattern at the workspace root, as in
    gitignore rules.
    """
    return pathspec.PathSpec.from_lines("gitwildmatch", expand_braces(pattern))
