"""
Ollama backend adapter.

Ollama exposes a local REST API at http://localhost:11434.
This module calls that API and translates each /api/generate response
into a Sample that the rest of ollama-bench understands.

Failure handling is split in two:
  - the server can't be reached at all (health check, model listing)
    → raise, the run can't start
  - one generation request goes wrong (timeout, 5xx, garbage body)
    → return a failed Sample, the run carries on

The one exception is "model not found" during generation, which means the
model vanished after pre-flight validation. That aborts the run.
"""

import logging
import time
from typing import Optional

import httpx

from ollama_bench.core.config import (
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    BenchmarkConfig,
    get_default_headers,
    get_user_agent,
)
from ollama_bench.core.errors import (
    ConnectionFailedError,
    ModelNotFoundError,
    NetworkTimeoutError,
    OllamaNotRunningError,
    ParseError,
)
from ollama_bench.core.metrics import Sample

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class OllamaBackend:
    """
    Wraps ollama's /api/tags and /api/generate endpoints.

    One httpx.Client is kept for the whole run so connections are reused
    between iterations. Pass `transport` to swap the network out (tests use
    httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = get_default_headers()
        headers["User-Agent"] = get_user_agent()
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._available: Optional[set[str]] = None

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "OllamaBackend":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Server checks ─────────────────────────────────────────────────────────

    def health_check(self) -> bool:
        """True if the server answers /api/tags with a 2xx."""
        try:
            resp = self._client.get("/api/tags")
        except httpx.ConnectError:
            raise OllamaNotRunningError()
        except httpx.TimeoutException:
            raise NetworkTimeoutError(self.timeout)
        except httpx.HTTPError as e:
            logger.debug("health check failed: %s", e)
            raise ConnectionFailedError(self.base_url)

        logger.debug("health check: HTTP %d", resp.status_code)
        return resp.is_success

    def list_models(self) -> list[str]:
        """Return names of all locally available models, e.g. ["llama2:7b"]."""
        try:
            resp = self._client.get("/api/tags")
        except httpx.ConnectError:
            raise OllamaNotRunningError()
        except httpx.TimeoutException:
            raise NetworkTimeoutError(self.timeout)
        except httpx.HTTPError:
            raise ConnectionFailedError(self.base_url)

        if not resp.is_success:
            raise ConnectionFailedError(f"{self.base_url} (HTTP {resp.status_code} from Ollama)")

        try:
            models = resp.json().get("models", [])
            return [m["name"] for m in models]
        except (ValueError, AttributeError, KeyError, TypeError) as e:
            raise ParseError(str(e))

    def model_exists(self, name: str) -> bool:
        """
        Ollama lists untagged models as "name:latest", so a bare "llama2"
        matches "llama2:latest".

        The model list is fetched on the first call and reused afterwards,
        so pre-flight over N models costs one /api/tags request. A model
        removed later shows up as a 404 from generate().
        """
        if self._available is None:
            self._available = set(self.list_models())
        available = self._available
        if name in available:
            return True
        return ":" not in name and f"{name}:latest" in available

    # ── Generation ───────────────────────────────────────────────────────────

    def generate(self, model: str, prompt: str, config: BenchmarkConfig) -> Sample:
        """
        Send one non-streaming generation request and return a Sample.

        stream=False gets all of ollama's timing data in one response object.
        TTFT is therefore approximated by prompt_eval_duration.
        """
        payload = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": config.temperature,
                "num_predict": config.max_tokens,
            },
        }

        start = time.perf_counter()

        try:
            resp = self._client.post("/api/generate", json=payload)
        except httpx.TimeoutException:
            return Sample.failed(
                model, prompt, f"Request timed out after {self.timeout:g}s", _elapsed_ms(start)
            )
        except httpx.HTTPError as e:
            return Sample.failed(model, prompt, f"Request failed: {e}", _elapsed_ms(start))

        if not resp.is_success:
            error_text = resp.text or "Unknown error"
            if resp.status_code == 404 or _mentions_missing_model(error_text):
                raise ModelNotFoundError(model)
            return Sample.failed(
                model, prompt, f"HTTP {resp.status_code}: {error_text}", _elapsed_ms(start)
            )

        total_ms = _elapsed_ms(start)

        try:
            raw = resp.json()
            sample = Sample.from_generate_response(model, prompt, raw, total_ms)
        except (ValueError, AttributeError, TypeError, OverflowError) as e:
            return Sample.failed(model, prompt, f"Failed to parse response: {e}", total_ms)

        logger.debug(
            "%s: %d prompt + %d completion tokens, %.1f tok/s, ttft %d ms, wall %d ms",
            model,
            sample.prompt_tokens,
            sample.completion_tokens,
            sample.throughput_tokens_per_sec,
            sample.time_to_first_token_ms,
            sample.total_duration_ms,
        )
        return sample


def _mentions_missing_model(error_text: str) -> bool:
    # e.g. {"error":"model 'llama9' not found, try pulling it first"}
    text = error_text.lower()
    return "model" in text and "not found" in text
