from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Literal

import httpx

logger = logging.getLogger(__name__)

FailureKind = Literal["unavailable", "timeout", "empty", "http-error"]

ITINERARY_STOP_TOKENS = ("```", "\n\n\n", "Human:", "User:", "Assistant:")
CHAT_STOP_TOKENS = ITINERARY_STOP_TOKENS + ("Question:", "Response:", "Suggestions:")


@dataclass(frozen=True)
class GenerationFailure:
    """Typed reason a generation attempt produced no text."""

    kind: FailureKind
    detail: str = ""


@dataclass(frozen=True)
class GenerationOptions:
    temperature: float = 0.3
    top_p: float = 0.8
    num_predict: int = 2000
    stop: tuple[str, ...] = field(default=ITINERARY_STOP_TOKENS)

    def as_payload(self) -> dict[str, Any]:
        return {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "num_predict": self.num_predict,
            "stop": list(self.stop),
        }


ITINERARY_OPTIONS = GenerationOptions()
SWAP_OPTIONS = GenerationOptions(temperature=0.4, top_p=0.9, num_predict=1000)
CHAT_OPTIONS = GenerationOptions(temperature=0.7, top_p=0.9, num_predict=250, stop=CHAT_STOP_TOKENS)


def _model_names(tags: dict[str, Any]) -> list[str]:
    return [m.get("name", "") for m in tags.get("models") or [] if isinstance(m, dict)]


def _has_model(names: list[str], model: str) -> bool:
    if model in names:
        return True
    if ":" not in model:
        return f"{model}:latest" in names
    base, tag = model.split(":", 1)
    return tag == "latest" and base in names


def _generated_text(response: httpx.Response) -> str | None:
    """The 'response' field of an /api/generate body; None when the body is not JSON."""
    try:
        return response.json().get("response") or ""
    except (ValueError, AttributeError):
        return None


class LLMProvider:
    """Client for an Ollama inference server.

    Every call is one probe plus at most one generation request. There are
    no retries here; callers fall back instead of re-querying.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        probe_timeout: float = 3.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.probe_timeout = probe_timeout
        self._client = client

    @asynccontextmanager
    async def _session(self, timeout: float) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(timeout=timeout) as client:
                yield client

    async def probe(self) -> GenerationFailure | None:
        """Check the server answers and the expected model is installed."""
        try:
            async with self._session(self.probe_timeout) as client:
                response = await asyncio.wait_for(
                    client.get(f"{self.base_url}/api/tags", timeout=self.probe_timeout),
                    timeout=self.probe_timeout,
                )
        except (asyncio.TimeoutError, httpx.HTTPError) as e:
            return GenerationFailure("unavailable", f"probe failed: {e!r}")

        if not response.is_success:
            return GenerationFailure("unavailable", f"probe returned HTTP {response.status_code}")

        try:
            names = _model_names(response.json())
        except ValueError:
            return GenerationFailure("unavailable", "probe returned invalid JSON")

        if not _has_model(names, self.model):
            return GenerationFailure(
                "unavailable", f"model {self.model} not loaded (available: {names})"
            )
        return None

    async def generate(
        self,
        prompt: str,
        options: GenerationOptions = ITINERARY_OPTIONS,
        timeout: float = 60.0,
    ) -> str | GenerationFailure:
        """
        Probe, then run one bounded, non-streaming generation.

        Args:
            prompt: Complete prompt text
            options: Sampling options and stop tokens
            timeout: Overall bound in seconds; the in-flight request is
                cancelled when it elapses

        Returns:
            Raw generated text, or a GenerationFailure
        """
        failure = await self.probe()
        if failure is not None:
            logger.warning(f"[Ollama] Probe failed: {failure.detail}")
            return failure

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": options.as_payload(),
        }

        logger.info(f"[Ollama] Generating with {self.model} (timeout {timeout}s)")
        try:
            async with self._session(timeout) as client:
                response = await asyncio.wait_for(
                    client.post(f"{self.base_url}/api/generate", json=payload, timeout=timeout),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return GenerationFailure("timeout", f"generation exceeded {timeout}s")
        except httpx.HTTPError as e:
            return GenerationFailure("unavailable", f"generation request failed: {e!r}")

        if not response.is_success:
            return GenerationFailure(
                "http-error", f"HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            text = response.json().get("response") or ""
        except (ValueError, AttributeError):
            return GenerationFailure("http-error", "generation returned invalid JSON body")

        if not isinstance(text, str) or not text.strip():
            return GenerationFailure("empty", "zero-length response")

        logger.info(f"[Ollama] Response received, length {len(text)}")
        logger.debug(f"[Ollama] Raw response preview: {text[:200]}")
        return text

    async def diagnose(self, include_generation: bool = False) -> dict[str, Any]:
        """Connectivity and capability checks for the diagnostics endpoint."""
        results: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "config": {"url": self.base_url, "model": self.model},
            "tests": [],
        }
        tests: list[dict[str, Any]] = results["tests"]
        reachable = False

        async with self._session(30.0) as client:
            try:
                response = await client.get(f"{self.base_url}/api/tags", timeout=self.probe_timeout)
                if response.is_success:
                    models = response.json().get("models") or []
                    tests.append(
                        {
                            "name": "Basic Connectivity",
                            "status": "PASS",
                            "details": f"Connected successfully. Found {len(models)} models.",
                            "models": [{"name": m.get("name"), "size": m.get("size")} for m in models],
                        }
                    )
                    reachable = True
                else:
                    tests.append(
                        {
                            "name": "Basic Connectivity",
                            "status": "FAIL",
                            "details": f"HTTP {response.status_code}",
                        }
                    )
            except httpx.HTTPError as e:
                tests.append({"name": "Basic Connectivity", "status": "ERROR", "details": str(e)})
            except (ValueError, AttributeError):
                tests.append(
                    {
                        "name": "Basic Connectivity",
                        "status": "FAIL",
                        "details": "Server did not answer with Ollama JSON",
                    }
                )

            try:
                response = await client.post(
                    f"{self.base_url}/api/show",
                    json={"name": self.model},
                    timeout=self.probe_timeout,
                )
                if response.is_success:
                    tests.append(
                        {
                            "name": "Model Availability",
                            "status": "PASS",
                            "details": f"Model {self.model} is available",
                        }
                    )
                else:
                    tests.append(
                        {
                            "name": "Model Availability",
                            "status": "FAIL",
                            "details": f"Model {self.model} not found or not accessible",
                        }
                    )
            except httpx.HTTPError as e:
                tests.append({"name": "Model Availability", "status": "ERROR", "details": str(e)})

            if reachable and include_generation:
                tests.append(await self._generation_check(client))
            else:
                tests.append(
                    {
                        "name": "Simple Generation",
                        "status": "SKIPPED",
                        "details": "Add ?full=true to test generation capabilities",
                    }
                )

            if tests[-1]["name"] == "Simple Generation" and tests[-1]["status"] == "PASS":
                tests.append(await self._json_check(client))
            else:
                tests.append(
                    {
                        "name": "JSON Generation",
                        "status": "SKIPPED",
                        "details": "Requires basic connectivity and generation test to pass",
                    }
                )

        results["summary"] = self._summarize(tests)
        return results

    async def _generation_check(self, client: httpx.AsyncClient) -> dict[str, Any]:
        payload = {
            "model": self.model,
            "prompt": 'Respond with JSON: {"message": "Hello!", "status": "working"}',
            "stream": False,
            "options": {"temperature": 0.3, "num_predict": 100},
        }
        try:
            response = await client.post(f"{self.base_url}/api/generate", json=payload, timeout=30.0)
        except httpx.HTTPError as e:
            return {"name": "Simple Generation", "status": "ERROR", "details": str(e)}
        if not response.is_success:
            return {
                "name": "Simple Generation",
                "status": "FAIL",
                "details": f"HTTP {response.status_code}: {response.text[:200]}",
            }
        text = _generated_text(response)
        if text is None:
            return {"name": "Simple Generation", "status": "FAIL", "details": "Response was not JSON"}
        return {
            "name": "Simple Generation",
            "status": "PASS",
            "details": "Model responded successfully",
            "response": text[:200],
            "responseLength": len(text),
        }

    async def _json_check(self, client: httpx.AsyncClient) -> dict[str, Any]:
        payload = {
            "model": self.model,
            "prompt": (
                "Generate a simple travel recommendation in JSON format:\n"
                '{"destination": "Paris", "activity": "Visit the Eiffel Tower", '
                '"cost": 25, "duration": 2}\n\nRespond ONLY with valid JSON, no other text.'
            ),
            "stream": False,
            "options": {"temperature": 0.1, "num_predict": 100},
        }
        try:
            response = await client.post(f"{self.base_url}/api/generate", json=payload, timeout=30.0)
        except httpx.HTTPError as e:
            return {"name": "JSON Generation", "status": "ERROR", "details": str(e)}
        if not response.is_success:
            return {
                "name": "JSON Generation",
                "status": "FAIL",
                "details": f"HTTP {response.status_code}",
            }
        text = _generated_text(response)
        if text is None:
            return {"name": "JSON Generation", "status": "FAIL", "details": "Response was not JSON"}
        text = text.strip()
        try:
            parsed = json.loads(text)
        except ValueError as e:
            return {
                "name": "JSON Generation",
                "status": "PARTIAL",
                "details": "Model responded but JSON parsing failed",
                "response": text[:200],
                "parseError": str(e),
            }
        return {
            "name": "JSON Generation",
            "status": "PASS",
            "details": "Model can generate valid JSON",
            "parsedResponse": parsed,
        }

    def _summarize(self, tests: list[dict[str, Any]]) -> dict[str, Any]:
        passed = sum(1 for t in tests if t["status"] == "PASS")
        statuses = {t["name"]: t["status"] for t in tests}
        recommendations = []

        if statuses.get("Basic Connectivity") != "PASS":
            recommendations.append("Check if Ollama server is running: `ollama serve`")
            recommendations.append("Verify OLLAMA_URL in your .env file")
        if statuses.get("Model Availability") != "PASS":
            recommendations.append(f"Install the model: `ollama pull {self.model}`")
        if statuses.get("Simple Generation") == "ERROR":
            recommendations.append("Ollama may be stuck - try restarting `ollama serve`")

        if passed == len(tests):
            overall = "ALL_PASS"
        elif passed > 0:
            overall = "PARTIAL"
        else:
            overall = "FAIL"
        return {
            "overall": overall,
            "passed": passed,
            "total": len(tests),
            "recommendations": recommendations,
        }
