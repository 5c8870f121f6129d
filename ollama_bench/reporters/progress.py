"""
Progress sinks for the Benchmarker.

TerminalProgress draws one live bar per model using Rich. QuietProgress
prints nothing but errors. Both write to stderr so that stdout only ever
carries the results (which matters for `-o json` / `-o csv`).
"""

from rich.console import Console
from rich.markup import escape

from ollama_bench.core.config import PROGRESS_BAR_WIDTH
from ollama_bench.core.progress import ProgressReporter


def _bar(current: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """
    Render a unicode progress bar for `current` out of `total` steps.
    Clamped to [0, 1] so an overshoot never breaks the bar.
    """
    if total <= 0:
        return "░" * width
    ratio = min(current / total, 1.0)
    filled = round(ratio * width)
    return "█" * filled + "░" * (width - filled)


class TerminalProgress(ProgressReporter):
    def __init__(self, console: Console = None):
        self.console = console or Console(stderr=True)

    def on_run_start(self, total_models: int, iterations: int) -> None:
        self.console.print(
            f"\n⚡ Benchmarking [bold]{total_models}[/bold] model{'s' if total_models != 1 else ''}"
            f" with [bold]{iterations}[/bold] iteration{'s' if iterations != 1 else ''} each"
        )

    def on_model_start(self, model: str, index: int, total: int) -> None:
        self.console.print(f"\nTesting [bold]{escape(model)}[/bold] ({index}/{total})...")

    def on_iteration_progress(self, model: str, current: int, total: int) -> None:
        percentage = current * 100 // total if total > 0 else 0
        self.console.print(
            f"Testing {escape(model)}... [cyan]{_bar(current, total)}[/cyan] {percentage}% ({current}/{total})",
            end="\r",
            highlight=False,
        )

    def on_model_complete(self, model: str) -> None:
        # pad so the leftover of the bar line gets overwritten
        line = f"Testing {escape(model)}... [green]✓ Complete[/green]"
        self.console.print(line + " " * (PROGRESS_BAR_WIDTH + 16), highlight=False)

    def on_info(self, message: str) -> None:
        self.console.print(f"[dim]{escape(message)}[/dim]")

    def on_error(self, message: str) -> None:
        # new line so the bar being drawn isn't overwritten
        self.console.print(f"\n[red]{escape(message)}[/red]", highlight=False)


class QuietProgress(ProgressReporter):
    def __init__(self, console: Console = None):
        self.console = console or Console(stderr=True)

    def on_error(self, message: str) -> None:
        self.console.print(message, markup=False, highlight=False)
