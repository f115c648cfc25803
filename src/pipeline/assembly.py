"""
Audio assembly stage.

Downloads the chunks in index order, appends their PCM frames into a single
WAV written to a temporary file, uploads the result to its permanent key and
then deletes the temporary chunks (best effort).
"""

import logging
import tempfile
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from src.logger import log_function
from src.storage import BaseStorage
from src.tts import concatenate_wavs, wav_duration_seconds
from .errors import AssemblyError, CleanupError
from .synthesis import AudioChunk, final_audio_key


logger = logging.getLogger("pipeline")


@dataclass(frozen=True)
class AssembledEpisode:
    audio_ref: str
    duration_seconds: float


def _download_in_order(chunks: Sequence[AudioChunk], storage: BaseStorage) -> Iterator[bytes]:
    for chunk in chunks:
        yield storage.download(chunk.storage_ref)


@log_function(logger_name="pipeline", log_execution_time=True)
def assemble_episode(
    job_id: str,
    chunks: Sequence[AudioChunk],
    storage: BaseStorage,
    prefix: str,
) -> AssembledEpisode:
    """
    Build, upload and measure the final episode audio.

    Raises:
        AssemblyError: On download, concatenation or upload failure
    """
    ordered = sorted(chunks, key=lambda chunk: chunk.index)
    if not ordered:
        raise AssemblyError(f"No audio chunks to assemble for job {job_id}")
    expected = list(range(len(ordered)))
    if [chunk.index for chunk in ordered] != expected:
        raise AssemblyError(f"Audio chunks of job {job_id} are not contiguous")

    key = final_audio_key(prefix, job_id)
    try:
        with tempfile.TemporaryFile() as output:
            duration = concatenate_wavs(_download_in_order(ordered, storage), output)
            output.seek(0)
            audio_ref = storage.upload(output.read(), key)
    except (RuntimeError, ValueError, OSError) as e:
        raise AssemblyError(f"Failed to assemble audio for job {job_id}: {e}") from e

    logger.info(
        f"[{job_id}] Assembled {len(ordered)} chunks into {audio_ref} ({duration:.2f}s)"
    )
    cleanup_chunks(job_id, [chunk.storage_ref for chunk in ordered], storage)
    return AssembledEpisode(audio_ref=audio_ref, duration_seconds=duration)


def find_assembled_episode(
    job_id: str, storage: BaseStorage, prefix: str
) -> Optional[AssembledEpisode]:
    """
    Return the already uploaded final audio of a job, if any.

    Raises:
        AssemblyError: If the stored audio cannot be read
    """
    key = final_audio_key(prefix, job_id)
    if not storage.exists(key):
        return None
    audio_ref = storage.make_ref(key)
    try:
        duration = wav_duration_seconds(storage.download(audio_ref))
    except (RuntimeError, ValueError) as e:
        raise AssemblyError(f"Stored audio of job {job_id} is unreadable: {e}") from e
    logger.info(f"[{job_id}] Final audio already stored at {audio_ref}")
    return AssembledEpisode(audio_ref=audio_ref, duration_seconds=duration)


def cleanup_chunks(job_id: str, refs: Sequence[str], storage: BaseStorage) -> List[CleanupError]:
    """
    Delete temporary chunk objects. Failures are logged and returned, never raised.
    """
    failures: List[CleanupError] = []
    for ref in refs:
        try:
            storage.delete(ref)
        except Exception as e:
            failure = CleanupError(f"Failed to delete temporary chunk {ref}: {e}")
            logger.warning(f"[{job_id}] {failure}")
            failures.append(failure)
    if refs and not failures:
        logger.info(f"[{job_id}] Deleted {len(refs)} temporary chunks")
    return failures
