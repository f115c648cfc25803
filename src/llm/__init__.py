"""This package contains the text generation providers and their prompts.
base.py : TextProvider interface
gemini.py : Gemini provider (primary)
openai.py : OpenAI provider (secondary)
prompts.py : Prompt templates and the brand opener
"""

from .base import TextProvider
from .gemini import GeminiTextProvider, get_gemini_client
from .openai import OpenAITextProvider, init_llm_openai
from .prompts import BRAND_OPENER


__all__ = [
    "BRAND_OPENER",
    "GeminiTextProvider",
    "OpenAITextProvider",
    "TextProvider",
    "get_gemini_client",
    "init_llm_openai",
]
