"""
Job orchestrator: runs every step of one episode job, in order.

    PENDING -> PROCESSING -> transcript -> summary -> script -> audio -> COMPLETED

Any error escaping a step marks the job FAILED with a user-safe progress
message and emits the failure notifications once. The orchestrator never
retries the whole pipeline; provider fallback happens inside the steps.
"""

import logging
from typing import Optional

from src.db import EpisodeJob, GenerationMode, JobStatus
from src.logger import log_function
from src.tts import DEFAULT_VOICE_A, DEFAULT_VOICE_B
from . import progress
from .context import JobSettings, PipelineContext
from .errors import GENERIC_FAILURE_MESSAGE, PipelineError
from .progress import ProgressReporter
from .stages import load_transcript, run_audio_stage, run_script_stage, run_summary_stage
from .summary_length import parse_summary_length, resolve_summary_length
from .trigger import GenerateEpisodeRequest


logger = logging.getLogger("pipeline")


def resolve_job_settings(
    job: EpisodeJob, request: Optional[GenerateEpisodeRequest] = None
) -> JobSettings:
    """
    Combine the job record and its trigger into the settings of this run.

    The tier stored on the job wins over the trigger's. A script already
    written fixes the mode (narration text or dialogue lines). Voices are
    fixed once the job is PROCESSING, so a resumed run keeps the voices its
    earlier chunks were synthesized with.
    """
    request_tier = request.summary_length_tier if request else None
    summary_length = resolve_summary_length(job.summary_length, request_tier)

    if isinstance(job.script, str):
        mode = GenerationMode.SINGLE
    elif isinstance(job.script, list):
        mode = GenerationMode.MULTI
    else:
        mode = (request.mode if request else None) or job.generation_mode or GenerationMode.SINGLE

    voices = request.voice_config if request else None
    requested_a = voices.voice_a if voices else None
    requested_b = voices.voice_b if voices else None
    if job.status == JobStatus.PROCESSING:
        voice_a = job.voice_a or requested_a or DEFAULT_VOICE_A
        voice_b = job.voice_b or requested_b or DEFAULT_VOICE_B
    else:
        voice_a = requested_a or job.voice_a or DEFAULT_VOICE_A
        voice_b = requested_b or job.voice_b or DEFAULT_VOICE_B
    return JobSettings(summary_length=summary_length, mode=mode, voice_a=voice_a, voice_b=voice_b)


def start_job(ctx: PipelineContext, job: EpisodeJob, settings: JobSettings) -> None:
    """
    Move a PENDING job to PROCESSING and record the settings of the run.

    A job already PROCESSING is resumed; only settings it is still missing
    are written.
    """
    fields = {}
    if job.status == JobStatus.PROCESSING:
        logger.info(f"[{job.id}] Resuming job already in PROCESSING")
    else:
        fields["status"] = JobStatus.PROCESSING
        fields["progress_message"] = progress.STARTING
    if parse_summary_length(job.summary_length) is None:
        fields["summary_length"] = settings.summary_length
    if job.voice_a != settings.voice_a:
        fields["voice_a"] = settings.voice_a
    if job.voice_b != settings.voice_b:
        fields["voice_b"] = settings.voice_b
    if fields:
        ctx.job_store.update(job.id, **fields)


def fail_job(ctx: PipelineContext, job_id: str, error: Exception) -> EpisodeJob:
    """Mark the job FAILED, emit the failure notifications and return the job."""
    if isinstance(error, PipelineError):
        user_message = error.user_message
        logger.error(f"[{job_id}] Pipeline failed: {type(error).__name__}: {error}")
    else:
        user_message = GENERIC_FAILURE_MESSAGE
        logger.error(
            f"[{job_id}] Pipeline failed with unexpected error: {type(error).__name__}: {error}",
            exc_info=error,
        )

    try:
        ctx.job_store.update(
            job_id,
            status=JobStatus.FAILED,
            progress_message=user_message,
            failure_reason=type(error).__name__,
        )
    except Exception as e:
        logger.error(f"[{job_id}] Could not mark job as FAILED: {e}", exc_info=True)
        raise

    job = ctx.job_store.read(job_id)
    ctx.notifier.notify_failure(job)
    return job


@log_function(logger_name="pipeline", log_execution_time=True)
def run_episode_pipeline(
    ctx: PipelineContext, request: GenerateEpisodeRequest
) -> EpisodeJob:
    """
    Run (or resume) the pipeline of ``request.job_id``.

    Returns:
        The job record after the run (COMPLETED or FAILED, or unchanged if it
        was already terminal)

    Raises:
        JobNotFoundError: If the job does not exist
    """
    job_id = request.job_id
    job = ctx.job_store.read(job_id)
    if job.status.is_terminal:
        if job.notified_at is not None:
            logger.info(f"[{job_id}] Job already {job.status.value}, nothing to do")
            return job
        logger.warning(f"[{job_id}] Job {job.status.value} but never notified, sending notifications")
        if job.status == JobStatus.COMPLETED:
            ctx.notifier.notify_success(job)
        else:
            ctx.notifier.notify_failure(job)
        return ctx.job_store.read(job_id)

    logger.info(f"=== EPISODE PIPELINE STARTED [{job_id}] ===")
    reporter = ProgressReporter(ctx.job_store, job_id)
    try:
        settings = resolve_job_settings(job, request)
        logger.info(
            f"[{job_id}] tier={settings.summary_length.value} mode={settings.mode.value} "
            f"voices={settings.voice_a}/{settings.voice_b}"
        )
        start_job(ctx, job, settings)

        transcript = load_transcript(job, reporter)
        summary = run_summary_stage(ctx, job, transcript, reporter)
        script = run_script_stage(ctx, job, summary, settings, reporter)
        assembled = run_audio_stage(ctx, job, script, settings, reporter)

        ctx.job_store.update(
            job_id,
            status=JobStatus.COMPLETED,
            progress_message=None,
            final_audio_ref=assembled.audio_ref,
            duration_seconds=assembled.duration_seconds,
        )
    except Exception as e:
        return fail_job(ctx, job_id, e)

    job = ctx.job_store.read(job_id)
    ctx.notifier.notify_success(job)
    logger.info(f"=== EPISODE PIPELINE COMPLETED [{job_id}] ===")
    return job
