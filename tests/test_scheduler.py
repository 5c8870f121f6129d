"""
Tests for the Benchmarker: ordering, validation, failure handling, pacing.
"""

import pytest

from ollama_bench.core import scheduler
from ollama_bench.core.config import BenchmarkConfig
from ollama_bench.core.errors import (
    ConfigError,
    ConnectionFailedError,
    InvalidModelError,
    ModelNotFoundError,
    OllamaNotRunningError,
)
from ollama_bench.core.progress import ProgressReporter
from ollama_bench.core.scheduler import Benchmarker

from conftest import FakeBackend, RecordingProgress, failed_sample, ok_sample


def test_summaries_follow_input_order(config, progress):
    backend = FakeBackend(known_models=["b", "a", "c"])

    summaries = Benchmarker(backend, config, progress).run(["b", "a", "c"])

    assert [s.model for s in summaries] == ["b", "a", "c"]
    assert all(s.total_tests == 3 for s in summaries)
    assert backend.generate_calls == ["b"] * 3 + ["a"] * 3 + ["c"] * 3


def test_missing_model_aborts_before_any_generation(config, progress):
    backend = FakeBackend(known_models=["known"])

    with pytest.raises(ModelNotFoundError) as exc_info:
        Benchmarker(backend, config, progress).run(["known", "missing"])

    assert exc_info.value.model == "missing"
    assert backend.generate_calls == []
    assert progress.of_kind("progress") == []
    assert progress.of_kind("model_start") == []


def test_iteration_progress_events():
    backend = FakeBackend(known_models=["m"])
    progress = RecordingProgress()
    config = BenchmarkConfig(iterations=5, iteration_delay=0.0, model_delay=0.0)

    Benchmarker(backend, config, progress).run(["m"])

    per_model = [e for e in progress.events if e[0] in ("progress", "model_complete")]
    assert per_model == [
        ("progress", "m", 1, 5),
        ("progress", "m", 2, 5),
        ("progress", "m", 3, 5),
        ("progress", "m", 4, 5),
        ("progress", "m", 5, 5),
        ("model_complete", "m"),
    ]


def test_unreachable_server_aborts_before_progress(config, progress, unreachable_backend):
    with pytest.raises(OllamaNotRunningError):
        Benchmarker(unreachable_backend, config, progress).run(["llama2:7b"])

    assert progress.events == []
    assert unreachable_backend.calls == [("health_check",)]


def test_unhealthy_server_aborts(progress):
    backend = FakeBackend(healthy=False)
    config = BenchmarkConfig(iterations=1, ollama_base_url="http://gpu-box:11434")

    with pytest.raises(ConnectionFailedError) as exc_info:
        Benchmarker(backend, config, progress).run(["llama2:7b"])

    assert exc_info.value.url == "http://gpu-box:11434"
    assert progress.events == []


def test_model_events_carry_index_and_total(config, progress):
    backend = FakeBackend(known_models=["a", "b"])

    Benchmarker(backend, config, progress).run(["a", "b"])

    assert progress.of_kind("run_start") == [("run_start", 2, 3)]
    assert progress.of_kind("model_start") == [("model_start", "a", 1, 2), ("model_start", "b", 2, 2)]
    assert progress.of_kind("model_complete") == [("model_complete", "a"), ("model_complete", "b")]
    assert progress.of_kind("info") == [("info", "Validating models...")]


def test_failed_samples_do_not_stop_the_run(config, progress):
    backend = FakeBackend(
        known_models=["m"],
        scripts={"m": [ok_sample(tps=25.0, ttft=200), failed_sample(error="timeout"), ok_sample(tps=30.0, ttft=150)]},
    )

    [summary] = Benchmarker(backend, config, progress).run(["m"])

    assert summary.total_tests == 3
    assert summary.success_rate == pytest.approx(2 / 3)
    assert summary.avg_tokens_per_second == 27.5
    assert summary.avg_ttft_ms == 175.0
    errors = progress.of_kind("error")
    assert len(errors) == 1
    assert "timeout" in errors[0][1]


def test_model_removed_mid_run_aborts(config, progress):
    backend = FakeBackend(
        known_models=["a", "b"],
        scripts={"b": [ok_sample(model="b"), ModelNotFoundError("b")]},
    )

    with pytest.raises(ModelNotFoundError):
        Benchmarker(backend, config, progress).run(["a", "b"])

    assert backend.generate_calls == ["a", "a", "a", "b", "b"]


def test_pacing_delays(monkeypatch, progress):
    sleeps = []
    monkeypatch.setattr(scheduler.time, "sleep", sleeps.append)
    backend = FakeBackend(known_models=["a", "b"])
    config = BenchmarkConfig(iterations=3, iteration_delay=0.1, model_delay=0.5)

    Benchmarker(backend, config, progress).run(["a", "b"])

    # 2 gaps inside each model, 1 gap between the two models, none at the edges
    assert sleeps == [0.1, 0.1, 0.5, 0.1, 0.1]


def test_zero_delays_never_sleep(monkeypatch, config, progress):
    sleeps = []
    monkeypatch.setattr(scheduler.time, "sleep", sleeps.append)

    Benchmarker(FakeBackend(), config, progress).run(["llama2:7b", "mistral:7b"])

    assert sleeps == []


def test_broken_progress_sink_does_not_fail_run(config):
    class Exploding(ProgressReporter):
        def on_iteration_progress(self, model, current, total):
            raise RuntimeError("terminal went away")

    summaries = Benchmarker(FakeBackend(), config, Exploding()).run(["llama2:7b"])

    assert summaries[0].total_tests == 3


def test_default_progress_is_silent(config):
    summaries = Benchmarker(FakeBackend(), config).run(["llama2:7b"])

    assert summaries[0].success_rate == 1.0


def test_interrupt_drops_unfinished_model(config, progress):
    backend = FakeBackend(
        known_models=["a", "b"],
        scripts={"b": [ok_sample(model="b"), KeyboardInterrupt()]},
    )
    benchmarker = Benchmarker(backend, config, progress)

    with pytest.raises(KeyboardInterrupt):
        benchmarker.run(["a", "b"])

    assert progress.of_kind("model_complete") == [("model_complete", "a")]


def test_run_report_measures_duration(config):
    report = Benchmarker(FakeBackend(), config).run_report(["llama2:7b", "mistral:7b"])

    assert [s.model for s in report.summaries] == ["llama2:7b", "mistral:7b"]
    assert report.duration_seconds >= 0.0


@pytest.mark.parametrize("bad_config", [
    BenchmarkConfig(iterations=0),
    BenchmarkConfig(iterations=-2),
    BenchmarkConfig(temperature=5.0),
    BenchmarkConfig(ollama_base_url="localhost:11434"),
])
def test_invalid_config_aborts_before_contacting_server(bad_config, progress):
    backend = FakeBackend()

    with pytest.raises(ConfigError):
        Benchmarker(backend, bad_config, progress).run(["llama2:7b"])

    assert backend.calls == []
    assert progress.events == []


def test_empty_model_list_is_rejected(config, progress):
    backend = FakeBackend()

    with pytest.raises(ConfigError):
        Benchmarker(backend, config, progress).run([])

    assert backend.calls == []


def test_malformed_model_name_is_rejected(config, progress):
    backend = FakeBackend()

    with pytest.raises(InvalidModelError):
        Benchmarker(backend, config, progress).run(["llama2:7b", "bad model"])

    assert backend.calls == []
