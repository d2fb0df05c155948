"""Click CLI for chat context retrieval."""

import click


@click.group()
def cli():
    """chatctx — assemble editor context for chat requests."""


@cli.command()
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=False))
def init(root):
    """Write .chat_context/config.toml and an ignore file, and git-ignore them."""
    from chat_context.commands.init import run_init

    run_init(root)


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--root", "root_path", default=None, type=click.Path(exists=True, file_okay=False),
              help="Workspace root (defaults to the file's directory).")
@click.option("--unit-tests", is_flag=True, help="Skip e2e and integration test directories.")
@click.option("--no-directory", is_flag=True, help="Do not include sibling files.")
@click.option("--json", "as_json", is_flag=True, help="Print the interaction JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def context(file_path, root_path, unit_tests, no_directory, as_json, verbose):
    """Assemble the context that would accompany a request about FILE_PATH."""
    from chat_context.commands.context import run_context

    run_context(
        file_path, root_path,
        unit_tests=unit_tests,
        include_directory=not no_directory,
        as_json=as_json,
        verbose=verbose,
    )


@cli.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--root", "root_path", default=None, type=click.Path(exists=True, file_okay=False),
              help="Workspace root (defaults to the file's directory).")
@click.option("--unit-tests", is_flag=True, help="Skip e2e and integration test directories.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output.")
def tests(file_path, root_path, unit_tests, verbose):
    """List the test files found for FILE_PATH."""
    from chat_context.commands.context import run_tests

    run_tests(file_path, root_path, unit_tests, verbose)


@cli.command("check-ignore")
@click.argument("paths", nargs=-1, required=True)
@click.option("--root", "root_path", default=".", type=click.Path(exists=True, file_okay=False),
              help="Workspace root.")
def check_ignore(paths, root_path):
    """Report whether each path is excluded from context. Exits 1 if any is."""
    from chat_context.commands.context import run_check_ignore

    if run_check_ignore(paths, root_path):
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
