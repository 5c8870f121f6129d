"""
Test fixtures and helpers shared by the test modules.
"""

from typing import Optional

import pytest

from ollama_bench.core.config import BenchmarkConfig
from ollama_bench.core.errors import OllamaNotRunningError
from ollama_bench.core.metrics import ModelSummary, Sample
from ollama_bench.core.progress import ProgressReporter


def ok_sample(model: str = "m", tps: float = 25.0, ttft: int = 200, total_ms: int = 1000) -> Sample:
    return Sample(
        model=model,
        prompt="test",
        success=True,
        throughput_tokens_per_sec=tps,
        time_to_first_token_ms=ttft,
        total_duration_ms=total_ms,
        prompt_tokens=10,
        completion_tokens=25,
    )


def failed_sample(model: str = "m", error: str = "Failed") -> Sample:
    return Sample.failed(model, "test", error, total_duration_ms=50)


def summary(model: str, tps: float, ttft: float, success_rate: float = 1.0) -> ModelSummary:
    return ModelSummary(
        model=model,
        total_tests=5,
        success_rate=success_rate,
        avg_tokens_per_second=tps,
        min_tokens_per_second=tps,
        max_tokens_per_second=tps,
        avg_ttft_ms=ttft,
    )


class FakeBackend:
    """
    Scripted stand-in for OllamaBackend.

    `scripts` maps a model name to the Samples (or exceptions) that
    generate() hands out for it, in order. Once a script runs out, a
    default successful sample is returned.
    """

    def __init__(
        self,
        known_models=("llama2:7b", "mistral:7b"),
        scripts: Optional[dict] = None,
        healthy: bool = True,
        health_error: Optional[Exception] = None,
    ):
        self.known_models = set(known_models)
        self.scripts = {k: list(v) for k, v in (scripts or {}).items()}
        self.healthy = healthy
        self.health_error = health_error
        self.calls: list[tuple] = []

    def health_check(self) -> bool:
        self.calls.append(("health_check",))
        if self.health_error is not None:
            raise self.health_error
        return self.healthy

    def model_exists(self, name: str) -> bool:
        self.calls.append(("model_exists", name))
        return name in self.known_models

    def generate(self, model: str, prompt: str, config: BenchmarkConfig) -> Sample:
        self.calls.append(("generate", model))
        script = self.scripts.get(model)
        if script:
            item = script.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item
        return ok_sample(model=model)

    @property
    def generate_calls(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "generate"]


class RecordingProgress(ProgressReporter):
    """Progress sink that remembers every event it received."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_run_start(self, total_models, iterations):
        self.events.append(("run_start", total_models, iterations))

    def on_model_start(self, model, index, total):
        self.events.append(("model_start", model, index, total))

    def on_iteration_progress(self, model, current, total):
        self.events.append(("progress", model, current, total))

    def on_model_complete(self, model):
        self.events.append(("model_complete", model))

    def on_info(self, message):
        self.events.append(("info", message))

    def on_error(self, message):
        self.events.append(("error", message))

    def of_kind(self, kind: str) -> list[tuple]:
        return [e for e in self.events if e[0] == kind]


@pytest.fixture
def config() -> BenchmarkConfig:
    """Fast config: no pacing delays."""
    return BenchmarkConfig(iterations=3, iteration_delay=0.0, model_delay=0.0)


@pytest.fixture
def progress() -> RecordingProgress:
    return RecordingProgress()


@pytest.fixture
def unreachable_backend() -> FakeBackend:
    return FakeBackend(health_error=OllamaNotRunningError())
