"""Business logic for `chatctx init`."""

from pathlib import Path

import click

from chat_context.config import create_default_config
from chat_context.constants import CONFIG_DIR, GITIGNORE_ENTRY


def add_gitignore_entry(gitignore: Path) -> bool:
    """Append the config directory to .gitignore unless a line already names it.

    Returns True if the file was written.
    """
    text = gitignore.read_text() if gitignore.exists() else ""
    names = {line.strip().strip("/") for line in text.splitlines()}
    if CONFIG_DIR in names:
        return False
    if text and not text.endswith("\n"):
        text += "\n"
    gitignore.write_text(f"{text}{GITIGNORE_ENTRY}\n")
    return True


def run_init(root_path: str) -> None:
    repo = Path(root_path).resolve()
    try:
        path = create_default_config(repo)
    except FileExistsError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created {path}")
    if add_gitignore_entry(repo / ".gitignore"):
        click.echo(f"Added {GITIGNORE_ENTRY} to .gitignore")
