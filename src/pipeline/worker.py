"""
Episode worker: accepts trigger events and runs one pipeline per job.

Jobs run concurrently on a thread pool; the steps of a job run sequentially
on its thread. A job id that is already running is rejected, so one trigger
starts at most one run of a job at a time.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Union

from sqlalchemy.orm import sessionmaker

from src.db import EpisodeJob, JobStore
from src.llm import GeminiTextProvider, OpenAITextProvider
from src.storage import get_storage
from src.tts import AudioFormat, ElevenLabsSpeechProvider, GeminiSpeechProvider
from .config import PipelineConfig
from .context import PipelineContext
from .notifications import DatabaseNotificationSink, NotificationEmitter
from .orchestrator import run_episode_pipeline
from .trigger import GenerateEpisodeRequest


logger = logging.getLogger("pipeline")


def build_context(
    config: PipelineConfig, session_factory: Optional[sessionmaker] = None
) -> PipelineContext:
    """Wire the production collaborators (Gemini first, then OpenAI / ElevenLabs)."""
    job_store = JobStore(session_factory)
    audio_format = AudioFormat(
        sample_rate=config.sample_rate,
        channels=config.channels,
        sample_width=config.sample_width,
    )
    return PipelineContext(
        config=config,
        job_store=job_store,
        storage=get_storage(config.storage_backend, config.local_storage_root),
        text_providers=[
            GeminiTextProvider(model=config.gemini_text_model),
            OpenAITextProvider(model=config.openai_text_model),
        ],
        speech_providers=[
            GeminiSpeechProvider(model=config.gemini_tts_model, audio_format=audio_format),
            ElevenLabsSpeechProvider(model=config.elevenlabs_tts_model, audio_format=audio_format),
        ],
        notifier=NotificationEmitter(DatabaseNotificationSink(session_factory), job_store),
    )


class JobAlreadyRunningError(RuntimeError):
    """Raised when a trigger targets a job that is currently running."""


class EpisodeWorker:
    """
    Runs episode pipelines on a thread pool.

    Usage:
        worker = EpisodeWorker(build_context(PipelineConfig.from_env()))
        future = worker.submit({"jobId": job_id, "mode": "single"})
        job = future.result()
        worker.shutdown()
    """

    def __init__(self, ctx: PipelineContext, max_workers: Optional[int] = None):
        self.ctx = ctx
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or ctx.config.max_workers,
            thread_name_prefix="episode-worker",
        )
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()

        self.on_job_finished: Optional[Callable[[EpisodeJob], None]] = None

    def submit(self, event: Union[GenerateEpisodeRequest, dict[str, Any]]) -> Future:
        """
        Validate a trigger event and schedule its pipeline run.

        Raises:
            pydantic.ValidationError: If the event is malformed
            JobAlreadyRunningError: If the job is already running
        """
        request = (
            event
            if isinstance(event, GenerateEpisodeRequest)
            else GenerateEpisodeRequest.model_validate(event)
        )
        with self._lock:
            if request.job_id in self._in_flight:
                raise JobAlreadyRunningError(f"Episode job {request.job_id} is already running")
            self._in_flight.add(request.job_id)

        logger.info(f"Accepted trigger for job {request.job_id}")
        try:
            return self._executor.submit(self._run, request)
        except RuntimeError:
            self._release(request.job_id)
            raise

    def _run(self, request: GenerateEpisodeRequest) -> EpisodeJob:
        try:
            job = run_episode_pipeline(self.ctx, request)
        finally:
            self._release(request.job_id)
        if self.on_job_finished is not None:
            try:
                self.on_job_finished(job)
            except Exception as e:
                logger.error(f"on_job_finished callback failed for {job.id}: {e}", exc_info=True)
        return job

    def _release(self, job_id: str) -> None:
        with self._lock:
            self._in_flight.discard(job_id)

    def is_running(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._in_flight

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "EpisodeWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
