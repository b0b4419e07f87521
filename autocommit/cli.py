"""
Command-line interface using Typer with Rich integration.
"""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from .errors import AutocommitError, MutuallyExclusiveOptionsError


app = typer.Typer(
    name="autocommit",
    help="Generate commit messages, tickets and pull request descriptions from your git changes",
    add_completion=False,
    rich_markup_mode="rich",
)

# Global console for error handling
console = Console(stderr=True)


def setup_logging(log_level: str = "WARNING", log_file: Optional[Path] = None):
    """Setup logging configuration."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
        filter=lambda record: not record["extra"].get("commit_log", False)
    )

    # Commit outcome log
    if log_file:
        log_file = log_file.expanduser()
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} - {message}",
            filter=lambda record: record["extra"].get("commit_log", False)
        )


def version_callback(value: bool):
    if value:
        from . import __version__
        console.print(f"[bold blue]autocommit[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.command()
def main_command(
    context: Optional[str] = typer.Option(
        None, "--context", "-c",
        help="Add context to the message (e.g. the issue being fixed)"
    ),
    ticket: bool = typer.Option(
        False, "--ticket", "-j",
        help="Generate a ticket description instead of a commit message"
    ),
    pull_request: bool = typer.Option(
        False, "--pull-request", "-p",
        help="Generate a pull request description instead of a commit message"
    ),
    commits: Optional[str] = typer.Option(
        None, "--commits", "-n",
        help="Analyze the last N commits instead of staged changes"
    ),
    message_only: bool = typer.Option(
        False, "--message-only", "-m",
        help="Print the message without committing"
    ),
    model: Optional[str] = typer.Option(
        None, "--model", "-M",
        help="Model to use (overrides .autocommitrc)"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", "-l",
        help="Append commit outcomes to this file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-V",
        help="Show step-by-step trace output"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d",
        help="Enable debug logging"
    ),
    repo_path: Optional[Path] = typer.Option(
        None, "--repo", "-r",
        help="Git repository path (default: current directory)"
    ),
    version: bool = typer.Option(
        False, "--version", "-v",
        callback=version_callback, is_eager=True,
        help="Show version information"
    )
):
    """
    Generate a commit message from staged changes and commit it.

    [bold blue]Examples:[/bold blue]

    [green]autocommit[/green]                               # Commit staged changes
    [green]autocommit -c "Fixes issue #123"[/green]         # Add context
    [green]autocommit -m[/green]                            # Message only, no commit
    [green]autocommit -j[/green]                            # Ticket description
    [green]autocommit -p -n 10[/green]                      # PR description from the last 10 commits
    [green]autocommit -M gpt-4o -l ~/logs/autocommit.log[/green]
    """
    try:
        _run(context, ticket, pull_request, commits, message_only, model, log_file, verbose, debug, repo_path)
    except AutocommitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


def _run(
    context: Optional[str],
    ticket: bool,
    pull_request: bool,
    commits: Optional[str],
    message_only: bool,
    model: Optional[str],
    log_file: Optional[Path],
    verbose: bool,
    debug: bool,
    repo_path: Optional[Path]
):
    """Run the generate command."""
    if ticket and pull_request:
        raise MutuallyExclusiveOptionsError("Choose either --ticket or --pull-request, not both")

    setup_logging("DEBUG" if debug else "WARNING", log_file)

    # GitPython needs a git executable at import time
    from .core import Autocommit
    from .utils.prompts import ArtifactKind

    if ticket:
        kind = ArtifactKind.TICKET
    elif pull_request:
        kind = ArtifactKind.CHANGE_REQUEST
    else:
        kind = ArtifactKind.COMMIT

    autocommit = Autocommit.create(repo_path, model=model, verbose=True if verbose else None)

    artifact = autocommit.generate(
        kind,
        recent_commit_count=commits,
        context=context,
        message_only=message_only
    )

    autocommit.console.print_artifact(kind, artifact.text, plain=not autocommit.console.console.is_terminal)
    if artifact.committed:
        autocommit.console.print_success(f"Created commit {artifact.commit_hash[:8]}")


def main():
    """Main entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
