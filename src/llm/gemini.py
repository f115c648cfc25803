import logging
import os
from typing import Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types

from .base import TextProvider


logger = logging.getLogger("llm")


def get_gemini_client() -> genai.Client:
    """Get configured Gemini client.

    Raises:
        ValueError: If GEMINI_API_KEY not found
    """
    load_dotenv()
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise ValueError("GEMINI_API_KEY not found in environment variables")
    return genai.Client(api_key=api_key)


class GeminiTextProvider(TextProvider):
    """Primary text provider backed by the Gemini API."""

    name = "gemini"

    def __init__(
        self,
        model: str = "gemini-2.0-flash-lite",
        client: Optional[genai.Client] = None,
        default_temperature: float = 0.7,
    ):
        self.model = model
        self.default_temperature = default_temperature
        self._client = client

    @property
    def client(self) -> genai.Client:
        # Built on first use so a missing key only fails this provider
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def generate(self, prompt: str, temperature: Optional[float] = None) -> str:
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self.default_temperature if temperature is None else temperature,
            ),
        )
        text = (response.text or "").strip()
        if not text:
            raise RuntimeError(f"Gemini model {self.model} returned an empty response")
        logger.debug(f"Gemini {self.model} returned {len(text)} characters")
        return text
