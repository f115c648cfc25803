import logging
import os
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

from .base import TextProvider


logger = logging.getLogger("llm")


def init_llm_openai() -> OpenAI:
    """
    Initialize OpenAI client.

    Raises:
        ValueError: If OPENAI_API_KEY not found
    """
    load_dotenv()
    openai_api_key = os.environ.get("OPENAI_API_KEY")
    if not openai_api_key:
        raise ValueError("OPENAI_API_KEY not found in environment variables.")
    return OpenAI(api_key=openai_api_key)


class OpenAITextProvider(TextProvider):
    """Secondary text provider backed by the OpenAI Responses API."""

    name = "openai"

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        client: Optional[OpenAI] = None,
        default_temperature: float = 0.7,
    ):
        self.model = model
        self.default_temperature = default_temperature
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = init_llm_openai()
        return self._client

    def generate(self, prompt: str, temperature: Optional[float] = None) -> str:
        response = self.client.responses.create(
            model=self.model,
            input=prompt,
            temperature=self.default_temperature if temperature is None else temperature,
        )
        text = (response.output_text or "").strip()
        if not text:
            raise RuntimeError(f"OpenAI model {self.model} returned an empty response")
        logger.debug(f"OpenAI {self.model} returned {len(text)} characters")
        return text
