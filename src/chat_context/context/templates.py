"""Prompt wrappers for context snippets, and their inverse."""

import re

from chat_context.constants import language_from_extension

CODE_CONTEXT_TEMPLATE = "Use the following code snippet from file `{file_path}`:\n```{language}\n{text}\n```"
SELECTED_CODE_TEMPLATE = "My selected code from file `{file_path}`:\n<selected>\n{text}\n</selected>"
EDITOR_SELECTION_TEMPLATE = (
    "I have the `{file_path}` file opened in my editor. "
    "You are able to answer questions about `{file_path}`. "
    "The following code snippet is my current selection in the editor:\n<selected>\n{text}\n</selected>"
)
DIRECTORY_FILE_TEMPLATE = "Codebase context from file path {file_name}: "

_CODE_CONTEXT_RE = re.compile(r"^Use the following code snippet from file `[^`]*`:\n```[^\n]*\n(.*)\n```$", re.DOTALL)
_SELECTED_RE = re.compile(r"^(?:My selected code from file|I have the) `[^`]*`.*?\n<selected>\n(.*)\n</selected>$", re.DOTALL)
_DIRECTORY_FILE_RE = re.compile(r"^Codebase context from file path [^\n:]*: (.*)$", re.DOTALL)


def populate_code_context_template(text: str, file_path: str) -> str:
    return CODE_CONTEXT_TEMPLATE.format(
        file_path=file_path, language=language_from_extension(file_path), text=text,
    )


def populate_selected_code_template(text: str, file_path: str) -> str:
    return SELECTED_CODE_TEMPLATE.format(file_path=file_path, text=text)


def populate_editor_selection_template(text: str, file_path: str) -> str:
    return EDITOR_SELECTION_TEMPLATE.format(file_path=file_path, text=text)


def populate_directory_file_template(text: str, file_name: str) -> str:
    return DIRECTORY_FILE_TEMPLATE.format(file_name=file_name) + text


def strip_context_wrapper(text: str) -> str:
    """Return the snippet inside a context template, or the text unchanged."""
    for pattern in (_CODE_CONTEXT_RE, _SELECTED_RE, _DIRECTORY_FILE_RE):
        match = pattern.match(text)
        if match:
            return match.group(1)
    return text
