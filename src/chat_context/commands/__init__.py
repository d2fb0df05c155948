"""Shared helpers for CLI commands."""

import logging
from pathlib import Path

import click

from chat_context.config import ContextSettings, load_config, load_context_settings
from chat_context.context.ignore_filter import IgnoreFilter


def configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)


def resolve_settings(root: Path) -> ContextSettings:
    """Load [context]/[ignore] settings, surfacing config errors as usage errors.

    A missing config file is not an error; defaults apply.
    """
    try:
        return load_context_settings(load_config(root))
    except (RuntimeError, ValueError) as e:
        raise click.UsageError(str(e)) from e


def load_ignore_filter(root: Path, settings: ContextSettings) -> IgnoreFilter:
    return IgnoreFilter.load(root, settings.ignore_file, repo_name=root.name)
