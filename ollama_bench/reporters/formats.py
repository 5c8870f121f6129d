"""
Plain-text renderers for a BenchmarkReport: JSON, CSV and Markdown.

Each renderer returns a string, so the same output can go to stdout
(`-o json`) or into a file (`-e results.json`).
"""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Union

from ollama_bench.core.compare import comparisons
from ollama_bench.core.errors import ConfigError, ExportError
from ollama_bench.core.metrics import BenchmarkReport

logger = logging.getLogger(__name__)

CSV_HEADER = [
    "Model",
    "Total Tests",
    "Success Rate",
    "Avg Tokens/s",
    "Min Tokens/s",
    "Max Tokens/s",
    "Avg TTFT (ms)",
]


def format_duration(seconds: float) -> str:
    """65.2 → "1m 5s", 42.9 → "42s"."""
    whole = int(seconds)
    minutes, secs = divmod(whole, 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{whole}s"


def render_json(report: BenchmarkReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def render_csv(report: BenchmarkReport) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in report.summaries:
        writer.writerow([
            s.model,
            s.total_tests,
            f"{s.success_rate:.2f}",
            f"{s.avg_tokens_per_second:.2f}",
            f"{s.min_tokens_per_second:.2f}",
            f"{s.max_tokens_per_second:.2f}",
            f"{s.avg_ttft_ms:.0f}",
        ])
    return buf.getvalue()


def render_markdown(report: BenchmarkReport) -> str:
    lines = [
        "# Benchmark Results",
        "",
        "| Model | Success Rate | Avg Speed | Min Speed | Max Speed | Avg TTFT |",
        "|-------|--------------|-----------|-----------|-----------|----------|",
    ]
    for s in report.summaries:
        lines.append(
            f"| {s.model} | {s.success_rate * 100:.1f}% | {s.avg_tokens_per_second:.1f} tok/s"
            f" | {s.min_tokens_per_second:.1f} tok/s | {s.max_tokens_per_second:.1f} tok/s"
            f" | {s.avg_ttft_ms:.0f}ms |"
        )
    lines.append("")

    best = report.winner
    if best is not None:
        lines.append(f"## Winner: {best.model} 🏆")
        if len(report.summaries) > 1:
            lines.extend(["", "### Performance Comparison:"])
            # negative differences are left out, they'd read as "-12% faster"
            for other, speed_diff, ttft_diff in comparisons(report.summaries, best):
                if speed_diff > 0.0:
                    lines.append(f"- {speed_diff:.1f}% faster than {other.model}")
                if ttft_diff > 0.0:
                    lines.append(f"- {ttft_diff:.0f}% lower TTFT than {other.model}")
        lines.append("")

    lines.append(f"*Total duration: {format_duration(report.duration_seconds)}*")
    return "\n".join(lines) + "\n"


RENDERERS = {
    "json": render_json,
    "csv": render_csv,
    "markdown": render_markdown,
}

_EXPORT_EXTENSIONS = {
    ".json": render_json,
    ".csv": render_csv,
    ".md": render_markdown,
}


def export_renderer(path: Union[str, Path]):
    """The renderer matching `path`'s extension. Raises ConfigError if there's none."""
    renderer = _EXPORT_EXTENSIONS.get(Path(path).suffix.lower())
    if renderer is None:
        raise ConfigError("Export file must have .json, .csv, or .md extension")
    return renderer


def export_report(report: BenchmarkReport, path: Union[str, Path]) -> Path:
    """
    Write the report to `path`, picking the format from its extension.
    Raises ConfigError for an unknown extension and ExportError if the
    file can't be written.
    """
    path = Path(path)
    renderer = export_renderer(path)

    try:
        path.write_text(renderer(report), encoding="utf-8")
    except OSError as e:
        raise ExportError(str(e))

    logger.debug("exported %d summaries to %s", len(report.summaries), path)
    return path
