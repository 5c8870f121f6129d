"""
ollama-bench CLI entry point.

  ollama-bench llama2:7b                     benchmark one model
  ollama-bench llama2:7b mistral:7b phi-2    compare several models
  ollama-bench -n 10 llama2:7b               custom iteration count
  ollama-bench -o json llama2:7b mistral:7b  JSON output
  ollama-bench --prompt "Explain quantum computing" llama2:7b
"""

import logging
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from ollama_bench.backends.ollama import OllamaBackend
from ollama_bench.core.config import (
    APP_DESCRIPTION,
    APP_NAME,
    APP_VERSION,
    DEFAULT_ITERATIONS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_PROMPT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    BenchmarkConfig,
    validate_models,
)
from ollama_bench.core.errors import BenchmarkError
from ollama_bench.core.metrics import BenchmarkReport
from ollama_bench.core.scheduler import Benchmarker
from ollama_bench.reporters.formats import RENDERERS, export_renderer, export_report
from ollama_bench.reporters.progress import QuietProgress, TerminalProgress
from ollama_bench.reporters.terminal import show_report

app = typer.Typer(
    name=APP_NAME,
    help=APP_DESCRIPTION,
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("ollama_bench")


class OutputFormat(str, Enum):
    table = "table"
    json = "json"
    csv = "csv"
    markdown = "markdown"


def setup_logging(verbose: bool = False) -> None:
    """Route library logs through Rich on stderr. Quiet unless --verbose."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False


def _fail(error: BenchmarkError, code: int = 1) -> None:
    err_console.print(str(error), markup=False, highlight=False)
    raise typer.Exit(code=code)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{APP_NAME} {APP_VERSION}")
        raise typer.Exit()


def _print_report(report: BenchmarkReport, output: OutputFormat) -> None:
    if output == OutputFormat.table:
        show_report(report, console)
    else:
        # plain text so JSON/CSV stay machine-readable
        text = RENDERERS[output.value](report)
        typer.echo(text, nl=not text.endswith("\n"))


@app.command()
def main(
    models: list[str] = typer.Argument(..., metavar="MODEL", help="Models to benchmark (e.g., llama2:7b mistral:7b)"),
    iterations: int = typer.Option(DEFAULT_ITERATIONS, "--iterations", "-n", help="Number of test iterations per model"),
    output: OutputFormat = typer.Option(OutputFormat.table, "--output", "-o", help="Output format"),
    prompt: Optional[str] = typer.Option(None, "--prompt", "-p", help="Custom prompt for benchmarking"),
    max_tokens: int = typer.Option(DEFAULT_MAX_TOKENS, "--max-tokens", "-m", help="Maximum tokens to generate"),
    temperature: float = typer.Option(DEFAULT_TEMPERATURE, "--temperature", "-t", help="Temperature for generation"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT_SECONDS, "--timeout", help="Request timeout in seconds"),
    ollama_url: str = typer.Option(
        DEFAULT_OLLAMA_BASE_URL, "--ollama-url", envvar="OLLAMA_BENCH_URL", help="Ollama API base URL"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet mode (no progress indicators)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    export: Optional[str] = typer.Option(None, "--export", "-e", help="Export results to file (.json, .csv or .md)"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Benchmark one or more ollama models and compare their speed.

    Each model gets the same prompt N times. Failed requests lower the
    success rate but don't stop the run; a missing model or an unreachable
    server stops it before anything is measured.
    """
    setup_logging(verbose)

    config = BenchmarkConfig(
        iterations=iterations,
        prompt=prompt or DEFAULT_PROMPT,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout_seconds=timeout,
        ollama_base_url=ollama_url,
    )
    try:
        validate_models(models)
        config.validate()
        if export:
            export_renderer(export)
    except BenchmarkError as e:
        _fail(e)

    progress = QuietProgress(err_console) if quiet else TerminalProgress(err_console)

    if not quiet:
        err_console.print("🔍 Checking Ollama connection...")

    with OllamaBackend(config.ollama_base_url, config.timeout_seconds) as backend:
        benchmarker = Benchmarker(backend, config, progress)
        try:
            report = benchmarker.run_report(models)
        except BenchmarkError as e:
            _fail(e)
        except KeyboardInterrupt:
            err_console.print("\n[yellow]Benchmark interrupted.[/yellow]")
            raise typer.Exit(code=130)

    _print_report(report, output)

    if export:
        try:
            path = export_report(report, export)
        except BenchmarkError as e:
            _fail(e)
        if not quiet:
            err_console.print(f"📊 Results exported to: {path}", highlight=False)


if __name__ == "__main__":
    app()
