"""ollama-bench: Apache Bench-style performance benchmarking for Ollama models."""

__version__ = "0.1.1"
