"""
Progress notifications emitted by the Benchmarker.

ProgressReporter is the sink interface. Every method is a no-op here, so
a sink only overrides what it cares about and the Benchmarker never has
to check which kind of sink it was given. Notifications are
fire-and-forget: they return nothing and have no effect on results.

Concrete sinks (terminal bar, quiet mode) live in ollama_bench.reporters.progress.
"""


class ProgressReporter:
    def on_run_start(self, total_models: int, iterations: int) -> None:
        pass

    def on_model_start(self, model: str, index: int, total: int) -> None:
        """`index` is 1-based."""

    def on_iteration_progress(self, model: str, current: int, total: int) -> None:
        """Called right before iteration `current` (1-based) is sent."""

    def on_model_complete(self, model: str) -> None:
        pass

    def on_info(self, message: str) -> None:
        pass

    def on_error(self, message: str) -> None:
        pass
