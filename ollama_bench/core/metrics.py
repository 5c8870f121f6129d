"""
Core data models for ollama-bench.

A Sample is the outcome of one generation request. The backend builds it,
the Benchmarker collects one list of Samples per model, and the aggregator
folds each list into a ModelSummary. Summaries are what the comparator,
the reporters and the exporters consume.

Ollama reports its timing values in nanoseconds. Samples store
milliseconds (TTFT, wall time) and tokens/second (throughput).
"""

import math
import statistics
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

NANOS_PER_SECOND = 1_000_000_000
NANOS_PER_MILLI = 1_000_000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _count(payload: dict[str, Any], key: str) -> int:
    """A non-negative integer field of an /api/generate body, 0 if absent."""
    value = payload.get(key) or 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} is not a number: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{key} is not finite: {value!r}")
    if value < 0:
        raise ValueError(f"{key} is negative: {value!r}")
    return int(value)


@dataclass(frozen=True)
class Sample:
    """
    The result of one generation attempt against one model.

    A failed attempt is still a Sample: success=False, metrics zeroed,
    `error` set, and total_duration_ms holding the wall time spent before
    the failure. Failed samples count towards total_tests but never towards
    throughput or TTFT statistics.
    """

    # --- Identity ---
    model: str
    prompt: str
    success: bool

    # --- Derived metrics ---
    # completion tokens / generation-phase seconds (prompt evaluation excluded)
    throughput_tokens_per_sec: float = 0.0

    # Approximation: Ollama's prompt_eval_duration on a non-streaming
    # request. True first-token latency would need streaming.
    time_to_first_token_ms: int = 0

    # wall-clock time for the whole HTTP request, recorded even on failure
    total_duration_ms: int = 0

    # --- Token counts ---
    prompt_tokens: int = 0
    completion_tokens: int = 0

    error: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.model:
            raise ValueError("Sample.model must not be empty")
        if self.success and self.error is not None:
            raise ValueError("a successful Sample cannot carry an error")
        if not self.success:
            if self.error is None:
                raise ValueError("a failed Sample must carry an error")
            if self.throughput_tokens_per_sec != 0.0 or self.time_to_first_token_ms != 0:
                raise ValueError("a failed Sample must have zeroed metrics")
        if not math.isfinite(self.throughput_tokens_per_sec) or self.throughput_tokens_per_sec < 0:
            raise ValueError("Sample throughput must be a finite, non-negative number")
        if min(self.time_to_first_token_ms, self.total_duration_ms,
               self.prompt_tokens, self.completion_tokens) < 0:
            raise ValueError("Sample durations and token counts must be non-negative")

    @classmethod
    def failed(cls, model: str, prompt: str, error: str, total_duration_ms: int = 0) -> "Sample":
        return cls(
            model=model,
            prompt=prompt,
            success=False,
            total_duration_ms=max(total_duration_ms, 0),
            error=error,
        )

    @classmethod
    def from_generate_response(
        cls,
        model: str,
        prompt: str,
        payload: dict[str, Any],
        total_duration_ms: int,
    ) -> "Sample":
        """
        Build a successful Sample from a non-streaming /api/generate body.

        Missing fields (older ollama versions) count as 0, which in turn
        zeroes the metric derived from them instead of dividing by zero.
        Non-numeric, negative or non-finite fields raise ValueError.
        """
        prompt_eval_duration = _count(payload, "prompt_eval_duration")
        eval_duration = _count(payload, "eval_duration")
        prompt_tokens = _count(payload, "prompt_eval_count")
        completion_tokens = _count(payload, "eval_count")

        ttft_ms = prompt_eval_duration // NANOS_PER_MILLI

        if eval_duration > 0 and completion_tokens > 0:
            try:
                throughput = completion_tokens * NANOS_PER_SECOND / eval_duration
            except OverflowError:
                throughput = math.inf
            if not math.isfinite(throughput):
                raise ValueError(
                    f"throughput out of range ({completion_tokens} tokens in {eval_duration} ns)"
                )
        else:
            throughput = 0.0

        return cls(
            model=model,
            prompt=prompt,
            success=True,
            throughput_tokens_per_sec=float(throughput),
            time_to_first_token_ms=ttft_ms,
            total_duration_ms=max(total_duration_ms, 0),
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )


@dataclass(frozen=True)
class ModelSummary:
    """Aggregated statistics over all Samples for one model in one run."""

    model: str
    total_tests: int
    success_rate: float           # successes / total_tests, 0.0 when nothing ran
    avg_tokens_per_second: float
    min_tokens_per_second: float
    max_tokens_per_second: float
    avg_ttft_ms: float

    @classmethod
    def from_samples(cls, model: str, samples: Sequence[Sample]) -> "ModelSummary":
        """
        Fold one model's Samples into a summary.

        Throughput and TTFT are computed over successful samples only.
        With no successes every statistic is 0.0, never NaN or an
        infinite min/max left over from folding an empty list.
        """
        total = len(samples)
        successful = [s for s in samples if s.success]

        success_rate = len(successful) / total if total else 0.0

        speeds = [s.throughput_tokens_per_sec for s in successful]
        ttfts = [float(s.time_to_first_token_ms) for s in successful]

        if speeds:
            avg_tps = float(statistics.mean(speeds))
            min_tps = min(speeds)
            max_tps = max(speeds)
        else:
            avg_tps = min_tps = max_tps = 0.0

        avg_ttft = float(statistics.mean(ttfts)) if ttfts else 0.0

        return cls(
            model=model,
            total_tests=total,
            success_rate=success_rate,
            avg_tokens_per_second=avg_tps,
            min_tokens_per_second=min_tps,
            max_tokens_per_second=max_tps,
            avg_ttft_ms=avg_ttft,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "total_tests": self.total_tests,
            "success_rate": self.success_rate,
            "avg_tokens_per_second": self.avg_tokens_per_second,
            "min_tokens_per_second": self.min_tokens_per_second,
            "max_tokens_per_second": self.max_tokens_per_second,
            "avg_ttft_ms": self.avg_ttft_ms,
        }


def summarize(model: str, samples: Sequence[Sample]) -> ModelSummary:
    return ModelSummary.from_samples(model, samples)


@dataclass(frozen=True)
class BenchmarkReport:
    """
    Everything a finished run hands to the presentation layer:
    the summaries in input order plus total wall-clock duration.
    """

    summaries: list[ModelSummary]
    duration_seconds: float

    @property
    def winner(self) -> Optional[ModelSummary]:
        from ollama_bench.core.compare import winner

        return winner(self.summaries)

    def to_dict(self) -> dict[str, Any]:
        best = self.winner
        return {
            "results": [s.to_dict() for s in self.summaries],
            "duration_seconds": round(self.duration_seconds, 3),
            "winner": best.model if best else None,
        }
