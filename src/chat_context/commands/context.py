"""Business logic for `chatctx context`, `chatctx tests` and `chatctx check-ignore`."""

import asyncio
import json
import logging
from pathlib import Path

import click

from chat_context.commands import configure_logging, load_ignore_filter, resolve_settings
from chat_context.context.assembler import ContextAssembler
from chat_context.context.messages import pair_context_messages
from chat_context.token_estimation import estimate_tokens
from chat_context.transcript.interaction import Interaction
from chat_context.transcript.messages import InteractionMessage
from chat_context.workspace.local import LocalWorkspace
from chat_context.workspace.paths import uri_from_path

logger = logging.getLogger(__name__)


def _resolve_target(file_path: str, root_path: str | None) -> tuple[Path, Path]:
    target = Path(file_path).resolve()
    root = Path(root_path).resolve() if root_path else target.parent
    try:
        target.relative_to(root)
    except ValueError as e:
        raise click.UsageError(f"{target} is not inside workspace root {root}") from e
    return target, root


def run_context(
    file_path: str,
    root_path: str | None,
    unit_tests: bool,
    include_directory: bool,
    as_json: bool,
    verbose: bool,
) -> None:
    """Assemble context for a file and print it, or the turn JSON with as_json."""
    configure_logging(verbose)
    target, root = _resolve_target(file_path, root_path)
    logger.debug("Workspace root: %s", root)
    settings = resolve_settings(root)
    ignore_filter = load_ignore_filter(root, settings)
    assembler = ContextAssembler(LocalWorkspace(root), settings)

    context = assembler.assemble(
        uri_from_path(target),
        unit_test_only=unit_tests,
        include_directory=include_directory,
    )
    rel = target.relative_to(root).as_posix()
    interaction = Interaction(
        InteractionMessage(speaker="human", text=f"Context for {rel}"),
        InteractionMessage(speaker="assistant"),
        context,
        ignore_filter=ignore_filter,
    )

    async def _render() -> dict | list:
        if as_json:
            await interaction.get_full_context()
            return await interaction.to_json()
        return await interaction.get_context_fragments()

    result = asyncio.run(_render())
    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    if not result:
        click.echo(f"No context found for {rel}")
        return
    for fragment in result:
        file = fragment.file
        label = file.file_name if file is not None else "(no file)"
        click.echo(f"--- {label} (~{estimate_tokens(fragment.message.text)} tokens) ---")
        click.echo(fragment.message.text)
    click.echo(f"{len(result)} context file(s) for {rel}")


def run_tests(file_path: str, root_path: str | None, unit_tests: bool, verbose: bool) -> None:
    """List the test files that would be attached as context for a file."""
    configure_logging(verbose)
    target, root = _resolve_target(file_path, root_path)
    settings = resolve_settings(root)
    assembler = ContextAssembler(LocalWorkspace(root), settings)

    messages = asyncio.run(assembler.build_test_file_context(target.name, unit_tests))
    fragments = pair_context_messages(messages)
    if not fragments:
        click.echo(f"No test files found for {target.name}")
        return
    for fragment in fragments:
        if fragment.file is not None:
            click.echo(fragment.file.file_name)


def run_check_ignore(paths: tuple[str, ...], root_path: str) -> bool:
    """Print the ignore status of each path. Returns True if any is ignored."""
    root = Path(root_path).resolve()
    settings = resolve_settings(root)
    ignore_filter = load_ignore_filter(root, settings)

    any_ignored = False
    for path in paths:
        resolved = (root / path).resolve()
        ignored = ignore_filter.is_ignored(uri_from_path(resolved))
        any_ignored = any_ignored or ignored
        click.echo(f"{'ignored' if ignored else 'allowed'}\t{path}")
    return any_ignored
