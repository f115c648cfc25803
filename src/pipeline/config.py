"""
Configuration of the episode pipeline.

``PipelineConfig`` is built once (usually with ``PipelineConfig.from_env()``)
and handed to the orchestrator; no pipeline stage reads the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_TTS_CHUNK_WORDS = 120
DEFAULT_SUMMARY_CHUNK_CHAR_LIMIT = 18000
MIN_SUMMARY_CHUNK_CHAR_LIMIT = 2000
DEFAULT_SUMMARY_MAX_CHUNKS = 6


def _clean(raw: Optional[str]) -> str:
    return (raw or "").strip().strip("'\"")


def parse_positive_int(raw: Optional[str], default: int, minimum: int = 1) -> int:
    """
    Parse an integer setting, tolerating surrounding quotes.

    Returns ``default`` when the value is missing, not an integer, or below
    ``minimum``.

    Example:
        >>> parse_positive_int('"150"', 120)
        150
        >>> parse_positive_int("-3", 120)
        120
    """
    cleaned = _clean(raw)
    if not cleaned:
        return default
    try:
        value = int(cleaned)
    except ValueError:
        return default
    return value if value >= minimum else default


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration of one pipeline deployment."""

    # Text generation
    gemini_text_model: str = "gemini-2.0-flash-lite"
    openai_text_model: str = "gpt-4o-mini"
    script_temperature: float = 0.7
    summary_temperature: float = 0.3
    summary_chunk_char_limit: int = DEFAULT_SUMMARY_CHUNK_CHAR_LIMIT
    summary_max_chunks: int = DEFAULT_SUMMARY_MAX_CHUNKS

    # Speech synthesis (one audio format for every chunk of a job)
    gemini_tts_model: str = "gemini-2.5-flash-preview-tts"
    elevenlabs_tts_model: str = "eleven_flash_v2_5"
    tts_chunk_words: int = DEFAULT_TTS_CHUNK_WORDS
    sample_rate: int = 24000
    channels: int = 1
    sample_width: int = 2  # bytes, 16-bit PCM

    # Storage
    storage_backend: str = "local"
    local_storage_root: str = "data/storage"
    storage_prefix: str = "user-episodes"

    # Worker
    max_workers: int = 4

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build the configuration from environment variables (and .env)."""
        load_dotenv()
        defaults = cls()
        return cls(
            gemini_text_model=_clean(os.getenv("GEMINI_GENAI_MODEL")) or defaults.gemini_text_model,
            openai_text_model=_clean(os.getenv("OPENAI_TEXT_MODEL")) or defaults.openai_text_model,
            summary_chunk_char_limit=parse_positive_int(
                os.getenv("SUMMARY_CHUNK_CHAR_LIMIT"),
                DEFAULT_SUMMARY_CHUNK_CHAR_LIMIT,
                minimum=MIN_SUMMARY_CHUNK_CHAR_LIMIT + 1,
            ),
            summary_max_chunks=parse_positive_int(
                os.getenv("SUMMARY_MAX_CHUNKS"), DEFAULT_SUMMARY_MAX_CHUNKS
            ),
            gemini_tts_model=_clean(os.getenv("GEMINI_TTS_MODEL")) or defaults.gemini_tts_model,
            elevenlabs_tts_model=_clean(os.getenv("ELEVENLABS_TTS_MODEL"))
            or defaults.elevenlabs_tts_model,
            tts_chunk_words=parse_positive_int(
                os.getenv("TTS_CHUNK_WORDS"), DEFAULT_TTS_CHUNK_WORDS
            ),
            storage_backend=_clean(os.getenv("STORAGE_BACKEND")) or defaults.storage_backend,
            local_storage_root=_clean(os.getenv("LOCAL_STORAGE_ROOT"))
            or defaults.local_storage_root,
            storage_prefix=(
                _clean(os.getenv("EPISODE_STORAGE_PREFIX")) or defaults.storage_prefix
            ).strip("/"),
            max_workers=parse_positive_int(os.getenv("PIPELINE_MAX_WORKERS"), defaults.max_workers),
        )
