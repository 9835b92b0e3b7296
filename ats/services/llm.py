"""Ollama client used for job description analysis."""

import asyncio
import json
import logging
import re
from typing import Any

import httpx

from ats.config import settings
from ats.utils.retry import retry_async

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for Ollama API.

    Provides methods to interact with Ollama for text generation tasks.
    """

    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url
            model: Model name. Defaults to settings.ollama_model
            timeout: Per-request timeout in seconds. Defaults to
                settings.llm_timeout_seconds
        """
        self.base_url = base_url or settings.ollama_base_url
        self.model = model or settings.ollama_model
        self.timeout = timeout or settings.llm_timeout_seconds

    @retry_async(
        max_attempts=lambda: settings.llm_max_attempts,
        retryable=(httpx.TransportError, asyncio.TimeoutError),
    )
    async def generate(self, prompt: str) -> str:
        """Call Ollama generate endpoint for text completion.

        Generation has no side effects, so transport failures and timeouts
        are retried with backoff.

        Args:
            prompt: Prompt for the model

        Returns:
            Generated text response from the model

        Raises:
            httpx.HTTPError: On API failure
            asyncio.TimeoutError: When a request exceeds the timeout
        """
        async with asyncio.timeout(self.timeout):
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/api/generate",
                    json={
                        "model": self.model,
                        "prompt": prompt,
                        "stream": False,
                    },
                )
                response.raise_for_status()
                data = response.json()
                return data.get("response", "")


def extract_json_from_response(response: str) -> dict[str, Any]:
    """Extract JSON from an LLM response using multiple strategies.

    Models may wrap JSON in markdown code blocks or add commentary.

    Args:
        response: Raw model response text

    Returns:
        Parsed JSON dictionary

    Raises:
        ValueError: If no valid JSON object can be extracted
    """
    # Strategy 1: Direct JSON parse
    try:
        parsed = json.loads(response)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Strategy 2: Extract from markdown code block
    code_block_match = re.search(
        r'```(?:json)?\s*(\{.*?\})\s*```',
        response,
        re.DOTALL
    )
    if code_block_match:
        try:
            return json.loads(code_block_match.group(1))
        except json.JSONDecodeError:
            pass

    # Strategy 3: Find first {...} block (handles commentary before/after)
    json_match = re.search(r'\{.*\}', response, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group())
        except json.JSONDecodeError:
            pass

    raise ValueError(
        f"Could not extract valid JSON from model response. "
        f"Response preview: {response[:200]}"
    )
