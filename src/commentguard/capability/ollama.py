"""
Ollama-backed external classifier.

Talks to a local Ollama server over HTTP:
- probe: GET /api/tags, checks the configured model has been pulled
- initialize: empty-prompt POST /api/generate, which loads the model
- classify: POST /api/generate with a spam-detection system prompt
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..errors import CapabilityError, CapabilityUnavailable
from .base import Availability


logger = logging.getLogger(__name__)


DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_OLLAMA_MODEL = "llama3.2:3b"

DEFAULT_SYSTEM_PROMPT = (
    "Detect scam indicators in a comment section. Check for: pressure/urgency, "
    "fake testimonial followed by a product or person's name, vague/unrealistic "
    "promises, requests for sensitive data, false crypto claims, specific trader "
    "names, robotic tone. Respond with only: \"spam\" or \"safe\""
)

PROMPT_TEMPLATE = 'Is this comment on its own spam?\n\nComment: "{text}"\n\nAnswer:'

# Deterministic, short answers
DEFAULT_OPTIONS = {
    "temperature": 0,
    "top_p": 1,
    "num_predict": 8,
}


def _model_names(payload: Dict[str, Any]) -> List[str]:
    names = []
    for model in payload.get("models", []):
        name = model.get("name") or model.get("model")
        if name:
            names.append(name)
    return names


class OllamaSession:
    """An initialized Ollama session bound to one model."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        model: str,
        system_prompt: str,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.client = client
        self.model = model
        self.system_prompt = system_prompt
        self.options = options or dict(DEFAULT_OPTIONS)

    async def classify(self, text: str) -> str:
        """
        Ask the model for a verdict.

        Args:
            text: Comment text

        Returns:
            Raw model response text

        Raises:
            CapabilityError: On HTTP failure or a malformed response body
        """
        try:
            resp = await self.client.post(
                "/api/generate",
                json={
                    "model": self.model,
                    "system": self.system_prompt,
                    "prompt": PROMPT_TEMPLATE.format(text=text),
                    "stream": False,
                    "options": self.options,
                },
            )
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise CapabilityError(f"Ollama request failed: {e}") from e

        return str(payload.get("response", ""))

    async def close(self) -> None:
        await self.client.aclose()


class OllamaClassifier:
    """
    External classifier capability backed by a local Ollama server.

    Args:
        base_url: Ollama server URL
        model: Model tag (e.g. llama3.2:3b)
        timeout: Per-request timeout in seconds, None for no limit
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_URL,
        model: str = DEFAULT_OLLAMA_MODEL,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def probe(self) -> Availability:
        """Check the server is reachable and the model has been pulled."""
        try:
            async with self._client() as client:
                resp = await client.get("/api/tags")
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.info("Ollama not reachable at %s: %s", self.base_url, e)
            return Availability.UNAVAILABLE

        names = _model_names(payload)
        if self.model in names or f"{self.model}:latest" in names:
            return Availability.AVAILABLE

        logger.info("Ollama model %s not pulled (have: %s)", self.model, ", ".join(names) or "none")
        return Availability.DOWNLOADABLE

    async def initialize(self, config: Dict[str, Any]) -> OllamaSession:
        """
        Load the model and return a session.

        Args:
            config: Recognized keys: system_prompt, options

        Returns:
            OllamaSession

        Raises:
            CapabilityUnavailable: If the model cannot be loaded
        """
        client = self._client()

        try:
            # Empty prompt only loads the model into memory
            resp = await client.post("/api/generate", json={"model": self.model})
            resp.raise_for_status()
        except httpx.HTTPError as e:
            await client.aclose()
            raise CapabilityUnavailable(f"Failed to load Ollama model {self.model}: {e}") from e

        return OllamaSession(
            client,
            self.model,
            config.get("system_prompt") or DEFAULT_SYSTEM_PROMPT,
            config.get("options"),
        )
