"""
Configuration for a benchmark run.

Defaults live here as module constants so the CLI, the backend and the
tests all agree on them. A BenchmarkConfig is built once per invocation,
validated, and then treated as read-only input by everything else.
"""

import re
from dataclasses import dataclass

from ollama_bench import __version__
from ollama_bench.core.errors import ConfigError, InvalidModelError

APP_NAME = "ollama-bench"
APP_VERSION = __version__
APP_DESCRIPTION = "⚡ Apache Bench-style Ollama LLM performance benchmarking"

DEFAULT_OLLAMA_BASE_URL = "http://localhost:11434"
DEFAULT_ITERATIONS = 5
DEFAULT_TIMEOUT_SECONDS = 120
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 100
DEFAULT_PROMPT = "Write a haiku about benchmarking language models."

# Politeness throttle between requests, in seconds.
# Not needed for correctness, only to avoid hammering a local server.
DEFAULT_ITERATION_DELAY = 0.1
DEFAULT_MODEL_DELAY = 0.5

# ── Validation limits ────────────────────────────────────────────────────────
MAX_ITERATIONS = 1000
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MAX_MAX_TOKENS = 4096

PROGRESS_BAR_WIDTH = 32

# alphanumerics plus ":" "-" "_" "." (e.g. "llama2:7b", "phi-2", "qwen2.5:0.5b")
_MODEL_NAME_PATTERN = re.compile(r"^[\w:.\-]+$")


def get_user_agent() -> str:
    return f"{APP_NAME}/{APP_VERSION}"


def get_default_headers() -> dict[str, str]:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


def validate_model_name(model: str) -> None:
    """Raise InvalidModelError if `model` can't be an ollama model name."""
    if not model:
        raise InvalidModelError("empty model name")
    # \w is unicode-aware, so accented letters pass too
    if not _MODEL_NAME_PATTERN.match(model):
        raise InvalidModelError(model)


@dataclass(frozen=True)
class BenchmarkConfig:
    """
    Everything a run needs besides the list of models.

    iteration_delay / model_delay are the pauses between consecutive
    requests and between consecutive models. Set them to 0 to disable.
    """

    iterations: int = DEFAULT_ITERATIONS
    prompt: str = DEFAULT_PROMPT
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ollama_base_url: str = DEFAULT_OLLAMA_BASE_URL
    iteration_delay: float = DEFAULT_ITERATION_DELAY
    model_delay: float = DEFAULT_MODEL_DELAY

    def validate(self) -> None:
        """
        Check user-supplied values before anything touches the network.
        Raises ConfigError on the first problem found.
        """
        if self.iterations <= 0:
            raise ConfigError("Iterations must be greater than 0")
        if self.iterations > MAX_ITERATIONS:
            raise ConfigError(f"Iterations must be {MAX_ITERATIONS} or less")

        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ConfigError(
                f"Temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}"
            )

        if self.max_tokens <= 0:
            raise ConfigError("Max tokens must be greater than 0")
        if self.max_tokens > MAX_MAX_TOKENS:
            raise ConfigError(f"Max tokens must be {MAX_MAX_TOKENS} or less")

        if self.timeout_seconds <= 0:
            raise ConfigError("Timeout must be greater than 0")

        if not self.ollama_base_url.startswith(("http://", "https://")):
            raise ConfigError("Ollama URL must start with http:// or https://")

        if self.iteration_delay < 0 or self.model_delay < 0:
            raise ConfigError("Delays must not be negative")


def validate_models(models: list[str]) -> None:
    if not models:
        raise ConfigError("At least one model must be specified")
    for model in models:
        validate_model_name(model)
