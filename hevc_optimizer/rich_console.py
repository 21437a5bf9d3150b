"""
Rich console output and progress tracking
"""

import logging
from pathlib import Path
from typing import Dict, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn,
    TimeElapsedColumn, TimeRemainingColumn
)
from rich.table import Table
from rich.text import Text

from .file_utils import format_file_size
from .models import Decision, MediaFile

# Global console instance
console = Console()


def setup_logging(debug: bool = False):
    """Route stdlib logging through rich"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug)],
    )


class RichOutput:
    """Rich console output manager"""

    def __init__(self, out: Optional[Console] = None):
        self.console = out or console

    def print_file_path(self, path: Path):
        self.console.print(f"\n[bold cyan]Processing:[/bold cyan] {path}")

    def print_decision(self, media_file: MediaFile, decision: Decision,
                       output_path: Optional[Path] = None):
        """Print stream summary, decision trace and ffmpeg arguments"""
        table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
        table.add_column("Property", style="cyan", width=20)
        table.add_column("Value", style="white")

        if media_file.file_path:
            table.add_row("File Path", str(media_file.file_path))
            if media_file.file_path.exists():
                table.add_row("Size", format_file_size(media_file.file_path.stat().st_size))
        table.add_row("Medium", media_file.file_medium)

        for kind in ('video', 'audio', 'subtitle'):
            codecs = [s.codec or '?' for s in media_file.streams if s.kind == kind]
            table.add_row(f"{kind.title()} Codecs", ', '.join(codecs) if codecs else "[dim]None[/dim]")

        if decision.should_process:
            table.add_row("Decision", "[orange3]Transcode to HEVC (NVENC)[/orange3]")
        else:
            table.add_row("Decision", "[green]✓ Skip[/green]")
        if output_path:
            table.add_row("Output Path", str(output_path))

        self.console.print(table)
        self.console.print(Panel(
            Text('\n'.join(decision.log) or '-'),
            title="[bold blue]Decision Log[/bold blue]",
            border_style="blue"
        ))
        if decision.should_process:
            self.console.print(Panel(
                Text(decision.preset),
                title="[bold yellow]FFmpeg Arguments[/bold yellow]",
                border_style="yellow"
            ))

    def create_progress_bar(self, total_duration: Optional[float] = None) -> Progress:
        """Progress bar for a single ffmpeg run"""
        if total_duration:
            return Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                TimeRemainingColumn(),
                console=self.console
            )
        return Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            TimeElapsedColumn(),
            console=self.console
        )

    def print_success(self, message: str = "Processing completed!"):
        self.console.print(f"[bold green]✓ {message}[/bold green]")

    def print_error(self, message: str, details: Optional[str] = None):
        self.console.print(f"[bold red]✗ {message}[/bold red]")
        if details:
            self.console.print(f"[red]Details: {details}[/red]")

    def print_warning(self, message: str):
        self.console.print(f"[bold yellow]⚠ {message}[/bold yellow]")

    def print_skipped(self, reason: str = "Skipped"):
        self.console.print(f"[bold yellow]⏭ {reason}[/bold yellow]")

    def print_interrupted(self, message: str = "Processing interrupted"):
        self.console.print(f"\n[bold red]⏹ {message}[/bold red]")

    def print_final_summary(self, counters: Dict[str, int]):
        table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="white", justify="right")

        table.add_row("Total Files", str(counters['total']))
        table.add_row("Transcode", f"[green]{counters['transcode']}[/green]")
        table.add_row("Skipped", f"[yellow]{counters['skipped']}[/yellow]")
        if counters['errors']:
            table.add_row("Errors", f"[red]{counters['errors']}[/red]")

        self.console.print(Panel(
            table,
            title="[bold green]✓ Done[/bold green]",
            border_style="green"
        ))


# Global rich output instance
rich_output = RichOutput()
