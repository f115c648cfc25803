"""
Text generation stage: neutral summary, then the narrated script.

Both calls go through the ordered text provider chain (Gemini, then OpenAI).
Long transcripts are summarized map-reduce style: each slice is reduced to
bullet points, then the bullets are consolidated into the final summary.
"""

import logging
import math
from typing import Callable, List, Optional, Sequence

from src.llm import TextProvider
from src.llm import prompts
from src.logger import log_function
from .config import PipelineConfig
from .dialogue import DialogueLine, enforce_dialogue_word_limit, parse_dialogue_script
from .fallback import run_with_fallback
from .summary_length import SummaryLengthConfig, count_words, truncate_to_word_limit


logger = logging.getLogger("pipeline")


def split_transcript(transcript: str, max_chunk_chars: int, max_chunks: int) -> List[str]:
    """
    Split a transcript into at most ``max_chunks`` equal character slices.

    Transcripts up to ``max_chunk_chars`` are returned whole. Longer ones use
    the smallest slice size that keeps the count within ``max_chunks``, so a
    slice may exceed ``max_chunk_chars`` for very long inputs.
    """
    if len(transcript) <= max_chunk_chars:
        return [transcript]
    chunk_count = min(math.ceil(len(transcript) / max_chunk_chars), max_chunks)
    size = math.ceil(len(transcript) / chunk_count)
    return [transcript[i : i + size] for i in range(0, len(transcript), size)]


def summarize_with_provider(
    provider: TextProvider, transcript: str, config: PipelineConfig
) -> str:
    """Run the whole summary procedure against a single provider."""
    segments = split_transcript(
        transcript, config.summary_chunk_char_limit, config.summary_max_chunks
    )
    temperature = config.summary_temperature

    if len(segments) == 1:
        body = prompts.transcript_body(transcript)
        return provider.generate(prompts.summary_prompt(body), temperature=temperature)

    logger.info(f"Transcript of {len(transcript)} chars split into {len(segments)} segments")
    bullets = []
    for index, segment in enumerate(segments, start=1):
        prompt = prompts.summary_segment_prompt(index, len(segments), segment)
        bullets.append(provider.generate(prompt, temperature=temperature).strip())

    body = prompts.consolidated_bullets_body(bullets)
    return provider.generate(prompts.summary_prompt(body), temperature=temperature)


@log_function(logger_name="pipeline", log_execution_time=True)
def generate_summary(
    transcript: str,
    providers: Sequence[TextProvider],
    config: PipelineConfig,
    on_fallback: Optional[Callable[[TextProvider], None]] = None,
) -> str:
    """
    Produce the neutral summary of ``transcript``.

    Raises:
        ProviderFailureError: If every provider failed
    """
    summary = run_with_fallback(
        providers,
        lambda provider: summarize_with_provider(provider, transcript, config),
        operation="Summary generation",
        on_fallback=on_fallback,
    )
    return summary.strip()


def _generate_script_text(
    prompt: str,
    providers: Sequence[TextProvider],
    config: PipelineConfig,
    on_fallback: Optional[Callable[[TextProvider], None]],
) -> str:
    return run_with_fallback(
        providers,
        lambda provider: provider.generate(prompt, temperature=config.script_temperature),
        operation="Script generation",
        on_fallback=on_fallback,
    )


@log_function(logger_name="pipeline", log_execution_time=True)
def generate_narration_script(
    summary: str,
    length_config: SummaryLengthConfig,
    providers: Sequence[TextProvider],
    config: PipelineConfig,
    on_fallback: Optional[Callable[[TextProvider], None]] = None,
) -> str:
    """
    Write the single-narrator script and enforce the tier's word budget.

    Raises:
        ProviderFailureError: If every provider failed
    """
    prompt = prompts.narrator_script_prompt(
        summary,
        min_words=length_config.min_words,
        max_words=length_config.max_words,
        min_minutes=length_config.minutes[0],
        max_minutes=length_config.minutes[1],
    )
    raw_script = _generate_script_text(prompt, providers, config, on_fallback).strip()

    word_count = count_words(raw_script)
    if word_count > length_config.max_words:
        logger.warning(
            f"Script exceeds target word count: {word_count} words "
            f"(max: {length_config.max_words}). Truncating."
        )
        return truncate_to_word_limit(raw_script, length_config.max_words)
    return raw_script


@log_function(logger_name="pipeline", log_execution_time=True)
def generate_dialogue_script(
    summary: str,
    length_config: SummaryLengthConfig,
    providers: Sequence[TextProvider],
    config: PipelineConfig,
    on_fallback: Optional[Callable[[TextProvider], None]] = None,
) -> List[DialogueLine]:
    """
    Write the two-host script, parse it and enforce the tier's word budget.

    Raises:
        ProviderFailureError: If every provider failed
        ScriptParseError: If the answer is not a valid dialogue
    """
    prompt = prompts.dialogue_script_prompt(
        summary,
        min_words=length_config.min_words,
        max_words=length_config.max_words,
        min_minutes=length_config.minutes[0],
        max_minutes=length_config.minutes[1],
    )
    raw_script = _generate_script_text(prompt, providers, config, on_fallback)
    lines = parse_dialogue_script(raw_script)
    return enforce_dialogue_word_limit(lines, length_config.max_words)
