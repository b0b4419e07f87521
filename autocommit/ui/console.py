"""
Console output with Rich components.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from ..utils.prompts import ArtifactKind


class AutocommitConsole:
    """Console interface for autocommit."""

    def __init__(self, verbose: bool = False, console: Optional[Console] = None):
        """Initialize console; traces are only shown when ``verbose`` is set."""
        self.verbose = verbose
        self._setup_styles()
        self.console = console or Console(theme=self.theme, highlight=False)
        self.err_console = Console(theme=self.theme, stderr=True, highlight=False)

    def _setup_styles(self) -> None:
        """Setup custom styles for consistent theming."""
        self.styles = {
            "title": "bold blue",
            "success": "bold green",
            "info": "blue",
            "muted": "dim",
            "commit_type": "bold magenta",
        }
        self.theme = Theme(self.styles)

    def print_trace(self, message: str) -> None:
        if self.verbose:
            self.err_console.print(Text(f"[Verbose] {message}", style="muted"))

    def print_success(self, message: str) -> None:
        self.err_console.print(f"[success]✓[/success] {message}")

    def print_artifact(self, kind: ArtifactKind, text: str, plain: bool = False) -> None:
        """Show the generated text; ``plain`` skips the panel so output can be piped."""
        if plain:
            self.console.print(text, markup=False, highlight=False, soft_wrap=True)
            return

        titles = {
            ArtifactKind.COMMIT: "Generated Commit Message",
            ArtifactKind.TICKET: "Generated Ticket",
            ArtifactKind.CHANGE_REQUEST: "Generated Pull Request",
            ArtifactKind.CONSISTENCY_FIX: "Refined Commit Message",
        }

        body = Text(text)
        if kind is ArtifactKind.COMMIT and ':' in text:
            prefix = text.split(':', 1)[0]
            body.stylize("commit_type", 0, len(prefix))

        self.console.print(Panel(body, title=titles[kind], box=box.ROUNDED, style="green"))
