"""
Command-line interface for twig.

Thin dispatch over ``Repository``: parses arguments, prints results and
turns ``TwigError`` into its user-facing message.

Example:
    twig init
    twig add notes.txt
    twig commit "Add notes"
    twig checkout --file notes.txt --commit 3f2a9c1
"""

import functools
from pathlib import Path
from typing import Any, Callable, Optional

import click

from twig.config import config
from twig.errors import TwigError
from twig.logging import get_twig_logger, initialize_logging
from twig.repository import Repository

log = get_twig_logger("cli")


def reports_errors(func: Callable) -> Callable:
    """Echo the message of any ``TwigError`` instead of a traceback."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TwigError as e:
            click.echo(e.message)

    return wrapper


@click.group()
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Working directory of the repository",
)
@click.pass_context
def cli(ctx: click.Context, work_dir: Path):
    """Twig: a small local version-control system."""
    settings = config.logging
    initialize_logging(
        log_dir=settings.log_path,
        level=settings.level,
        format_string=settings.format,
        rotation=settings.rotation,
        retention=settings.retention,
        enable_file_logging=settings.enable_file_logging,
        enable_console_logging=settings.enable_console_logging,
    )
    ctx.obj = Repository(work_dir, config=config)
    log.debug("Using working directory {work_dir}", work_dir=str(work_dir))


@cli.command()
@click.pass_obj
@reports_errors
def init(repo: Repository):
    """Create a new repository in the working directory."""
    repo.init()


@cli.command()
@click.argument("file")
@click.pass_obj
@reports_errors
def add(repo: Repository, file: str):
    """Stage FILE for the next commit."""
    repo.add(file)


@cli.command()
@click.argument("message", default="")
@click.pass_obj
@reports_errors
def commit(repo: Repository, message: str):
    """Commit the staged changes with MESSAGE."""
    repo.commit(message)


@cli.command()
@click.argument("file")
@click.pass_obj
@reports_errors
def rm(repo: Repository, file: str):
    """Unstage FILE, or stop tracking it and delete it."""
    repo.rm(file)


@cli.command(name="log")
@click.pass_obj
@reports_errors
def show_log(repo: Repository):
    """Show the history of the current branch."""
    abbrev = repo.config.repository.abbrev_length
    for entry in repo.log():
        click.echo(entry.format_log_entry(abbrev))


@cli.command(name="global-log")
@click.pass_obj
@reports_errors
def global_log(repo: Repository):
    """Show every commit ever made."""
    abbrev = repo.config.repository.abbrev_length
    for entry in repo.global_log():
        click.echo(entry.format_log_entry(abbrev))


@cli.command()
@click.argument("message")
@click.pass_obj
@reports_errors
def find(repo: Repository, message: str):
    """Print the ids of all commits with exactly MESSAGE."""
    for commit_id in repo.find(message):
        click.echo(commit_id)


@cli.command()
@click.pass_obj
@reports_errors
def status(repo: Repository):
    """Show branches, staged files and working-tree changes."""
    click.echo(repo.status().format())


@cli.command()
@click.argument("branch", required=False)
@click.option("--file", "path", default=None, help="Restore a single file")
@click.option(
    "--commit",
    "commit_id",
    default=None,
    help="Commit to restore --file from (default: HEAD)",
)
@click.pass_obj
@reports_errors
def checkout(
    repo: Repository,
    branch: Optional[str],
    path: Optional[str],
    commit_id: Optional[str],
):
    """
    Switch to BRANCH, or restore one file with --file.

    Example:
        twig checkout other
        twig checkout --file notes.txt
        twig checkout --file notes.txt --commit 3f2a9c1
    """
    if path is not None:
        if branch is not None:
            raise click.UsageError("BRANCH cannot be combined with --file")
        if commit_id is not None:
            repo.checkout_file_at(commit_id, path)
        else:
            repo.checkout_file(path)
    elif branch is not None:
        if commit_id is not None:
            raise click.UsageError("--commit requires --file")
        repo.checkout_branch(branch)
    else:
        raise click.UsageError("Give a BRANCH or --file")


@cli.command()
@click.argument("name")
@click.pass_obj
@reports_errors
def branch(repo: Repository, name: str):
    """Create branch NAME at the current commit."""
    repo.branch(name)


@cli.command(name="rm-branch")
@click.argument("name")
@click.pass_obj
@reports_errors
def rm_branch(repo: Repository, name: str):
    """Delete branch NAME."""
    repo.rm_branch(name)


@cli.command()
@click.argument("commit_id")
@click.pass_obj
@reports_errors
def reset(repo: Repository, commit_id: str):
    """Check out COMMIT_ID and move the current branch to it."""
    repo.reset(commit_id)


@cli.command()
@click.argument("branch")
@click.pass_obj
@reports_errors
def merge(repo: Repository, branch: str):
    """Merge BRANCH into the current branch."""
    result = repo.merge(branch)
    if result.has_conflicts:
        click.echo(result.message)


if __name__ == "__main__":
    cli()
