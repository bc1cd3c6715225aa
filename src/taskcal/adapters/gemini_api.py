"""Gemini API adapter - HTTP client for subtask suggestions."""

import asyncio
import logging

import requests

from taskcal.core.breakdown import (
    BreakdownRequest,
    BreakdownResult,
    build_breakdown_prompt,
    build_schedule_prompt,
    extract_json_object,
    parse_breakdown,
    parse_tips,
)
from taskcal.errors import ProviderError

API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-1.5-flash"

logger = logging.getLogger(__name__)


class GeminiSuggestionProvider:
    """
    Gemini REST adapter.

    Implements SuggestionProvider protocol. Sends a prompt, pulls the JSON
    out of the model's reply and validates it. No fallback logic - every
    failure is raised as ProviderError.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = API_BASE,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        # Header rather than query param so the key never shows up in error URLs
        self._session.headers.update({"x-goog-api-key": api_key})

    def _generate(self, prompt: str) -> str:
        """Blocking generateContent call. Returns the candidate text."""
        try:
            resp = self._session.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise ProviderError(f"Gemini request failed: {e}")
        except ValueError as e:
            raise ProviderError(f"Gemini returned a non-JSON body: {e}")

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts)
        except (KeyError, IndexError, TypeError, AttributeError):
            raise ProviderError("Gemini response has no candidate text")

        if not text.strip():
            raise ProviderError("Gemini returned an empty reply")
        logger.debug(f"Gemini replied with {len(text)} chars (model={self.model})")
        return text

    async def propose(self, request: BreakdownRequest) -> BreakdownResult:
        """Ask Gemini for a subtask breakdown."""
        text = await asyncio.to_thread(self._generate, build_breakdown_prompt(request))
        return parse_breakdown(extract_json_object(text))

    async def advise(self, task_requests: list[BreakdownRequest]) -> list[str]:
        """Ask Gemini for scheduling tips on a task list."""
        text = await asyncio.to_thread(self._generate, build_schedule_prompt(task_requests))
        return parse_tips(text)
