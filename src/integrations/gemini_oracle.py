"""
Gemini-backed advisory oracle.

Returns raw model text; validation and fallback are the advisory client's job.
"""

from __future__ import annotations

import google.generativeai as genai
from loguru import logger

from config import Settings

SYSTEM_PROMPT = """You assess digital fatigue from screen-time and daily-routine data.
Output VALID JSON ONLY with exactly two fields: "score" (integer 0-100) and
"recommendation" (at most 15 words). No markdown, no persona."""


class GeminiOracle:
    """Async Gemini client answering fatigue prompts with JSON."""

    def __init__(self, api_key: str, model_name: str = "gemini-1.5-flash"):
        self.api_key = api_key
        self.model_name = model_name
        self._client = None

    @property
    def client(self):
        """Lazy-load Gemini client."""
        if self._client is None:
            genai.configure(api_key=self.api_key)
            self._client = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=SYSTEM_PROMPT,
                generation_config={"response_mime_type": "application/json"},
            )
        return self._client

    async def generate(self, prompt: str) -> str:
        response = await self.client.generate_content_async(prompt)
        return response.text


def create_oracle(settings: Settings) -> GeminiOracle | None:
    """Build the oracle when an API key is configured."""
    if not settings.has_ai_configured():
        logger.warning("No Gemini API key - fatigue advisories will use fallback mode")
        return None
    return GeminiOracle(api_key=settings.gemini_api_key, model_name=settings.ai_model)
