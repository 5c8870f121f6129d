"""
Cross-model comparison: who won, and by how much.

The winner is the summary with the highest average throughput among
models that produced at least one successful sample. A model that never
succeeded has avg_tokens_per_second == 0.0 by construction and can't win.
"""

from typing import Optional, Sequence

from ollama_bench.core.metrics import ModelSummary


def winner(summaries: Sequence[ModelSummary]) -> Optional[ModelSummary]:
    """
    Return the fastest summary with a nonzero success rate, or None.
    Ties go to the summary that appears first.
    """
    best: Optional[ModelSummary] = None
    for summary in summaries:
        if summary.success_rate <= 0.0:
            continue
        # strict > so the first maximum is kept
        if best is None or summary.avg_tokens_per_second > best.avg_tokens_per_second:
            best = summary
    return best


def relative_difference(winner: ModelSummary, other: ModelSummary) -> tuple[float, float]:
    """
    Percent differences (speed, ttft) of `winner` relative to `other`.

    speed > 0 means the winner generates faster; ttft > 0 means the winner
    reaches its first token sooner. Either may be negative. A zero
    denominator yields 0.0 for that component.
    """
    if other.avg_tokens_per_second > 0.0:
        speed_diff = (
            (winner.avg_tokens_per_second - other.avg_tokens_per_second)
            / other.avg_tokens_per_second
            * 100.0
        )
    else:
        speed_diff = 0.0

    if other.avg_ttft_ms > 0.0:
        ttft_diff = (other.avg_ttft_ms - winner.avg_ttft_ms) / other.avg_ttft_ms * 100.0
    else:
        ttft_diff = 0.0

    return speed_diff, ttft_diff


def comparisons(
    summaries: Sequence[ModelSummary],
    best: ModelSummary,
) -> list[tuple[ModelSummary, float, float]]:
    """
    (other, speed_diff, ttft_diff) for every other model that succeeded
    at least once, in input order. Values are returned as computed,
    negatives included; reporters decide what to show.
    """
    rows = []
    for other in summaries:
        if other is best or other.model == best.model or other.success_rate <= 0.0:
            continue
        speed_diff, ttft_diff = relative_difference(best, other)
        rows.append((other, speed_diff, ttft_diff))
    return rows
