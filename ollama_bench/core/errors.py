"""
Error types for ollama-bench.

Only run-aborting problems are exceptions. A single failed generation
request is not an error here: the backend turns it into a failed Sample
and the benchmark keeps going.

Every error carries a short message and a hint telling the user what to
try next. The CLI prints both and exits non-zero.
"""


class BenchmarkError(Exception):
    """Base class for every error that aborts a benchmark run."""

    hint: str = ""

    def __init__(self, message: str, hint: str = ""):
        super().__init__(message)
        self.message = message
        if hint:
            self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"❌ {self.message}\n💡 {self.hint}"
        return f"❌ {self.message}"


class OllamaNotRunningError(BenchmarkError):
    def __init__(self):
        super().__init__("Ollama is not running", "Start with: ollama serve")


class ModelNotFoundError(BenchmarkError):
    def __init__(self, model: str):
        super().__init__(f"Model '{model}' not found", f"Install with: ollama pull {model}")
        self.model = model


class NetworkTimeoutError(BenchmarkError):
    def __init__(self, seconds: float):
        super().__init__(f"Network timeout after {seconds:g}s", "Try increasing --timeout")
        self.seconds = seconds


class InvalidModelError(BenchmarkError):
    def __init__(self, model: str):
        super().__init__(
            f"Invalid model name: '{model}'",
            "Model names should be in format: model:tag (e.g., llama2:7b)",
        )
        self.model = model


class ConnectionFailedError(BenchmarkError):
    def __init__(self, url: str):
        super().__init__(
            f"Failed to connect to Ollama at {url}",
            "Check if Ollama is running and accessible",
        )
        self.url = url


class ParseError(BenchmarkError):
    def __init__(self, detail: str):
        super().__init__(
            f"Failed to parse response: {detail}",
            "This might be a compatibility issue with your Ollama version",
        )


class ExportError(BenchmarkError):
    def __init__(self, detail: str):
        super().__init__(f"I/O error: {detail}", "Check file permissions and disk space")


class ConfigError(BenchmarkError):
    def __init__(self, detail: str):
        super().__init__(f"Configuration error: {detail}", "Run with --help to see valid options")
