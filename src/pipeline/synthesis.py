"""
Speech synthesis stage.

The script is cut into segments (word-bounded chunks of narration, or one
segment per dialogue line). Each segment is synthesized through the speech
provider chain and uploaded immediately under a deterministic key, so only
its ``AudioChunk`` reference stays in memory and a rerun can reuse chunks that
are already stored.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from src.logger import log_function
from src.storage import BaseStorage
from src.tts import SpeechProvider
from .dialogue import DialogueLine, sanitize_speaker_labels
from .errors import SynthesisFailureError
from .fallback import run_with_fallback


logger = logging.getLogger("pipeline")


@dataclass(frozen=True)
class SpeechSegment:
    """Text to synthesize as one chunk, with the logical voice to use."""

    index: int
    text: str
    voice_id: str


@dataclass(frozen=True)
class AudioChunk:
    """
    A synthesized chunk stored in object storage.

    Owned by the synthesis stage, consumed once by assembly, which deletes the
    stored object.
    """

    index: int
    source_text: str
    storage_ref: str


def chunk_key(prefix: str, job_id: str, index: int) -> str:
    return f"{prefix}/{job_id}/temp-chunks/chunk-{index:04d}.wav"


def final_audio_key(prefix: str, job_id: str) -> str:
    return f"{prefix}/{job_id}.wav"


def split_script_into_chunks(text: str, words_per_chunk: int) -> List[str]:
    """
    Split text into chunks of at most ``words_per_chunk`` whitespace separated words.

    Joining the chunks with single spaces gives back the original word sequence.
    """
    if words_per_chunk <= 0:
        raise ValueError(f"words_per_chunk must be positive, got {words_per_chunk}")
    words = text.split()
    return [
        " ".join(words[i : i + words_per_chunk])
        for i in range(0, len(words), words_per_chunk)
    ]


def plan_narration_segments(script: str, voice_id: str, words_per_chunk: int) -> List[SpeechSegment]:
    return [
        SpeechSegment(index=i, text=chunk, voice_id=voice_id)
        for i, chunk in enumerate(split_script_into_chunks(script, words_per_chunk))
    ]


def plan_dialogue_segments(
    lines: Sequence[DialogueLine], voice_a: str, voice_b: str
) -> List[SpeechSegment]:
    """One segment per line, in playback order, with labels stripped from the text."""
    segments = []
    for i, line in enumerate(lines):
        # Keep the raw line if stripping labels would leave nothing to say
        text = sanitize_speaker_labels(line.text) or line.text
        voice = voice_a if line.speaker == "A" else voice_b
        segments.append(SpeechSegment(index=i, text=text, voice_id=voice))
    return segments


@log_function(logger_name="pipeline", log_execution_time=True)
def synthesize_chunks(
    job_id: str,
    segments: Sequence[SpeechSegment],
    providers: Sequence[SpeechProvider],
    storage: BaseStorage,
    prefix: str,
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> List[AudioChunk]:
    """
    Synthesize and upload every segment, in order.

    A segment whose chunk is already stored is not sent to any provider.

    Args:
        job_id: Job the chunks belong to (part of the storage key)
        segments: Segments to synthesize
        providers: Speech providers in priority order
        storage: Object storage receiving the chunks
        prefix: Storage key prefix
        on_progress: Called with (index, total) before each segment

    Returns:
        One AudioChunk per segment, ordered by index

    Raises:
        SynthesisFailureError: If every provider failed for one segment
    """
    total = len(segments)
    chunks: List[AudioChunk] = []

    for segment in segments:
        if on_progress is not None:
            on_progress(segment.index, total)

        key = chunk_key(prefix, job_id, segment.index)
        if storage.exists(key):
            logger.info(f"[{job_id}] Chunk {segment.index + 1}/{total} already stored, reusing it")
            chunks.append(AudioChunk(segment.index, segment.text, storage.make_ref(key)))
            continue

        audio = run_with_fallback(
            providers,
            lambda provider: provider.synthesize(segment.text, segment.voice_id),
            operation=f"Speech synthesis of chunk {segment.index + 1}/{total}",
            error_factory=lambda message, errors: SynthesisFailureError(
                message, segment.index, errors
            ),
        )
        ref = storage.upload(audio, key)
        chunks.append(AudioChunk(segment.index, segment.text, ref))
        logger.info(f"[{job_id}] Chunk {segment.index + 1}/{total} uploaded ({len(audio)} bytes)")

    return sorted(chunks, key=lambda chunk: chunk.index)
