"""
Pipeline steps of one episode job.

Each step first checks whether its persisted output already exists and, if
so, returns it without calling any provider. Otherwise it reports progress,
does the work and persists the result before returning, so a rerun of the
job resumes after the last completed step.
"""

import logging
from typing import List, Union

from src.db import EpisodeJob, GenerationMode
from src.logger import log_function
from . import progress
from .assembly import AssembledEpisode, assemble_episode, cleanup_chunks, find_assembled_episode
from .context import JobSettings, PipelineContext
from .dialogue import DialogueLine, DialogueScript
from .errors import TranscriptMissingError
from .progress import ProgressReporter
from .synthesis import (
    chunk_key,
    plan_dialogue_segments,
    plan_narration_segments,
    synthesize_chunks,
)
from .text_generation import generate_dialogue_script, generate_narration_script, generate_summary


logger = logging.getLogger("pipeline")

Script = Union[str, List[DialogueLine]]


def load_transcript(job: EpisodeJob, reporter: ProgressReporter) -> str:
    """
    Raises:
        TranscriptMissingError: If the job has no usable transcript
    """
    reporter.report(progress.LOADING_TRANSCRIPT)
    transcript = (job.transcript or "").strip()
    if not transcript:
        raise TranscriptMissingError(f"No transcript found for episode job {job.id}")
    return transcript


@log_function(logger_name="pipeline", log_execution_time=True)
def run_summary_stage(
    ctx: PipelineContext, job: EpisodeJob, transcript: str, reporter: ProgressReporter
) -> str:
    """Return the job summary, generating and persisting it if missing."""
    if job.summary:
        logger.info(f"[{job.id}] Summary already exists, loading from job record")
        return job.summary

    reporter.report(progress.SUMMARIZING)
    summary = generate_summary(
        transcript,
        ctx.text_providers,
        ctx.config,
        on_fallback=lambda provider: reporter.report(progress.SUMMARIZING_BACKUP),
    )
    ctx.job_store.update(job.id, summary=summary)
    return summary


def deserialize_script(raw: object) -> Script:
    """Turn a persisted script column back into narration text or dialogue lines."""
    if isinstance(raw, str):
        return raw
    return DialogueScript.validate_python(raw)


def serialize_script(script: Script) -> object:
    if isinstance(script, str):
        return script
    return [line.model_dump() for line in script]


@log_function(logger_name="pipeline", log_execution_time=True)
def run_script_stage(
    ctx: PipelineContext,
    job: EpisodeJob,
    summary: str,
    settings: JobSettings,
    reporter: ProgressReporter,
) -> Script:
    """Return the job script, generating and persisting it if missing."""
    if job.script is not None:
        logger.info(f"[{job.id}] Script already exists, loading from job record")
        return deserialize_script(job.script)

    def on_fallback(provider):
        reporter.report(progress.WRITING_SCRIPT_BACKUP)

    script: Script
    if settings.mode == GenerationMode.MULTI:
        reporter.report(progress.WRITING_DIALOGUE)
        script = generate_dialogue_script(
            summary, settings.length_config, ctx.text_providers, ctx.config, on_fallback
        )
    else:
        reporter.report(progress.WRITING_SCRIPT)
        script = generate_narration_script(
            summary, settings.length_config, ctx.text_providers, ctx.config, on_fallback
        )

    ctx.job_store.update(job.id, script=serialize_script(script))
    return script


@log_function(logger_name="pipeline", log_execution_time=True)
def run_audio_stage(
    ctx: PipelineContext,
    job: EpisodeJob,
    script: Script,
    settings: JobSettings,
    reporter: ProgressReporter,
) -> AssembledEpisode:
    """Synthesize every chunk of the script and assemble the final audio."""
    prefix = ctx.config.storage_prefix
    if isinstance(script, str):
        segments = plan_narration_segments(script, settings.voice_a, ctx.config.tts_chunk_words)
        converting = progress.CONVERTING
    else:
        segments = plan_dialogue_segments(script, settings.voice_a, settings.voice_b)
        converting = progress.CONVERTING_DIALOGUE

    assembled = find_assembled_episode(job.id, ctx.storage, prefix)
    if assembled is not None:
        # A previous run stopped between upload and finalize: drop its leftovers
        leftovers = [
            ctx.storage.make_ref(chunk_key(prefix, job.id, s.index))
            for s in segments
            if ctx.storage.exists(chunk_key(prefix, job.id, s.index))
        ]
        cleanup_chunks(job.id, leftovers, ctx.storage)
        return assembled

    reporter.report(converting)
    chunks = synthesize_chunks(
        job.id,
        segments,
        ctx.speech_providers,
        ctx.storage,
        prefix,
        on_progress=lambda index, total: reporter.report(progress.chunk_progress(index, total)),
    )

    reporter.report(progress.ASSEMBLING)
    return assemble_episode(job.id, chunks, ctx.storage, prefix)
