"""
Terminal reporter for ollama-bench.

Takes a BenchmarkReport and renders it to the terminal using Rich:
one row per model, a winner line when more than one model ran, and the
total time the run took.

Design rules:
  - Labels (FAST/OK/SLOW) so you don't need to memorize thresholds
  - Failed iterations show up as a lower success rate, never as a crash
  - Only positive differences are shown on the winner line
"""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from ollama_bench.core.compare import comparisons
from ollama_bench.core.metrics import BenchmarkReport
from ollama_bench.reporters.formats import format_duration

console = Console()

# ── Rating bands ────────────────────────────────────────────────────────────
# Tuned for CPU and Apple Silicon. (limit, label, style), checked in order;
# anything past the last limit is SLOW.

TTFT_BANDS_MS = (              # lower is better
    (500.0, "FAST", "bold green"),
    (2000.0, "OK", "bold yellow"),
)

TPS_BANDS = (                  # higher is better
    (25.0, "FAST", "bold green"),
    (10.0, "OK", "bold yellow"),
)

MAX_MODEL_WIDTH = 24


# ── Helpers ──────────────────────────────────────────────────────────────────

def _rating(value: float, bands, higher_is_better: bool) -> Text:
    """Colored FAST/OK/SLOW label for `value` against `bands`."""
    for limit, label, style in bands:
        within = value >= limit if higher_is_better else value <= limit
        if within:
            return Text(label, style=style)
    return Text("SLOW", style="bold red")


def _success_style(rate: float) -> str:
    if rate >= 1.0:
        return "green"
    if rate > 0.0:
        return "yellow"
    return "red"


def _truncate(text: str, max_len: int = MAX_MODEL_WIDTH) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + "…"


def _winner_line(report: BenchmarkReport) -> str:
    """
    "🏆 Winner: mistral:7b (20.0% faster, 25% lower TTFT)", or "" if
    there's nothing to compare. At most two differences are listed.
    """
    best = report.winner
    if best is None or len(report.summaries) < 2:
        return ""

    notes = []
    for other, speed_diff, ttft_diff in comparisons(report.summaries, best):
        if speed_diff > 0.0:
            notes.append(f"{speed_diff:.1f}% faster")
        if ttft_diff > 0.0 and len(notes) < 2:
            notes.append(f"{ttft_diff:.0f}% lower TTFT")

    line = f"[bold green]🏆 Winner: {escape(best.model)}[/bold green]"
    if notes:
        line += f" ({', '.join(notes[:2])})"
    return line


# ── Main reporter ─────────────────────────────────────────────────────────────

def show_report(report: BenchmarkReport, out: Console = None) -> None:
    """
    Render a finished run as a table. This is the default `-o table` output.
    """
    out = out or console

    if not report.summaries:
        out.print("\n[red]No results to display.[/red]")
        return

    table = Table(box=box.ROUNDED, show_lines=False)
    table.add_column("Model", style="bold", no_wrap=True)
    table.add_column("Avg Speed", justify="right")
    table.add_column("Min / Max", justify="right", style="dim")
    table.add_column("TTFT", justify="right")
    table.add_column("Success", justify="right")

    for s in report.summaries:
        if s.success_rate > 0.0:
            speed = Text(f"{s.avg_tokens_per_second:.1f} tok/s ")
            speed.append_text(_rating(s.avg_tokens_per_second, TPS_BANDS, higher_is_better=True))
            ttft = Text(f"{s.avg_ttft_ms:.0f}ms ")
            ttft.append_text(_rating(s.avg_ttft_ms, TTFT_BANDS_MS, higher_is_better=False))
            spread = f"{s.min_tokens_per_second:.1f} / {s.max_tokens_per_second:.1f}"
        else:
            speed = Text("—", style="dim")
            ttft = Text("—", style="dim")
            spread = "—"

        success_style = _success_style(s.success_rate)
        table.add_row(
            escape(_truncate(s.model)),
            speed,
            spread,
            ttft,
            f"[{success_style}]{s.success_rate * 100:.1f}%[/{success_style}]"
            f" [dim]({s.total_tests} runs)[/dim]",
        )

    out.print()
    out.print(table)

    winner_line = _winner_line(report)
    if winner_line:
        out.print()
        out.print(winner_line)

    out.print(f"\n[cyan]📊 Completed in[/cyan] {format_duration(report.duration_seconds)}")
