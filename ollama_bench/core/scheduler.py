"""
Benchmark scheduler.

Runs every model through the same sequence of requests, one at a time:

  1. health check against the server (once)
  2. pre-flight: every requested model must exist, or nothing runs
  3. for each model, `iterations` generation requests with a short pause
     between them, then a longer pause before the next model
  4. each model is summarized as soon as its last iteration finishes

Requests are strictly sequential. Concurrent requests would measure server
contention instead of the model.

The backend is anything with health_check(), model_exists(name) and
generate(model, prompt, config) -> Sample. OllamaBackend is the real one;
tests pass a scripted fake.

If the run is interrupted (Ctrl-C) mid-model, KeyboardInterrupt propagates
and that model produces no summary.
"""

import logging
import time
from typing import Optional, Sequence

from ollama_bench.core.config import BenchmarkConfig, validate_models
from ollama_bench.core.errors import ConnectionFailedError, ModelNotFoundError
from ollama_bench.core.metrics import BenchmarkReport, ModelSummary, Sample
from ollama_bench.core.progress import ProgressReporter

logger = logging.getLogger(__name__)


class Benchmarker:
    def __init__(
        self,
        backend,
        config: BenchmarkConfig,
        progress: Optional[ProgressReporter] = None,
    ):
        self.backend = backend
        self.config = config
        self.progress = progress or ProgressReporter()

    def run(self, models: Sequence[str]) -> list[ModelSummary]:
        """
        Benchmark `models` in order and return one summary per model, same order.

        Raises OllamaNotRunningError / ConnectionFailedError / NetworkTimeoutError
        if the server can't be reached, and ModelNotFoundError if any model
        is missing (before any request is sent) or disappears mid-run.
        Bad input (model names or config values) raises
        InvalidModelError / ConfigError before the server is contacted.
        """
        validate_models(list(models))
        self.config.validate()

        self._check_health()
        self._validate_models(models)

        total_models = len(models)
        self._notify("on_run_start", total_models, self.config.iterations)

        summaries = []
        for idx, model in enumerate(models, start=1):
            samples = self._run_model(model, idx, total_models)

            summary = ModelSummary.from_samples(model, samples)
            logger.debug(
                "%s: %d tests, %.0f%% ok, %.1f tok/s avg, %.0f ms TTFT",
                model,
                summary.total_tests,
                summary.success_rate * 100,
                summary.avg_tokens_per_second,
                summary.avg_ttft_ms,
            )
            summaries.append(summary)

            if idx < total_models:
                self._pause(self.config.model_delay)

        return summaries

    def run_report(self, models: Sequence[str]) -> BenchmarkReport:
        """run(), plus the total wall-clock time it took."""
        start = time.perf_counter()
        summaries = self.run(models)
        return BenchmarkReport(summaries=summaries, duration_seconds=time.perf_counter() - start)

    # ── Phases ───────────────────────────────────────────────────────────────

    def _check_health(self) -> None:
        # connectivity errors from the backend propagate unchanged
        if not self.backend.health_check():
            raise ConnectionFailedError(self.config.ollama_base_url)

    def _validate_models(self, models: Sequence[str]) -> None:
        self._notify("on_info", "Validating models...")
        for model in models:
            if not self.backend.model_exists(model):
                raise ModelNotFoundError(model)

    def _run_model(self, model: str, index: int, total_models: int) -> list[Sample]:
        iterations = self.config.iterations
        samples: list[Sample] = []

        self._notify("on_model_start", model, index, total_models)

        for iteration in range(1, iterations + 1):
            self._notify("on_iteration_progress", model, iteration, iterations)

            sample = self.backend.generate(model, self.config.prompt, self.config)
            samples.append(sample)

            if not sample.success:
                logger.info("%s iteration %d/%d failed: %s", model, iteration, iterations, sample.error)
                self._notify("on_error", f"{model} iteration {iteration} failed: {sample.error}")

            if iteration < iterations:
                self._pause(self.config.iteration_delay)

        self._notify("on_model_complete", model)
        return samples

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _pause(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)

    def _notify(self, event: str, *args) -> None:
        """Forward an event to the progress sink. A broken sink never stops the run."""
        try:
            getattr(self.progress, event)(*args)
        except Exception:
            logger.debug("progress sink failed on %s", event, exc_info=True)
