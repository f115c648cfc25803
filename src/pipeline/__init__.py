"""
Episode generation pipeline.

Turns a transcript into a narrated audio episode:
    1. Summary (src.pipeline.text_generation)
    2. Script, narrator or two-host dialogue (src.pipeline.text_generation, src.pipeline.dialogue)
    3. Speech synthesis per chunk (src.pipeline.synthesis)
    4. Audio assembly (src.pipeline.assembly)
    5. Notifications (src.pipeline.notifications)

Usage:
    # CLI interface
    python -m src.pipeline submit --transcript-file talk.txt

    # Programmatic interface
    from src.pipeline import EpisodeWorker, PipelineConfig, build_context
    with EpisodeWorker(build_context(PipelineConfig.from_env())) as worker:
        job = worker.submit({"jobId": job_id, "mode": "multi"}).result()
"""

__version__ = "0.1.0"

from .config import PipelineConfig
from .context import JobSettings, PipelineContext
from .errors import (
    AssemblyError,
    CleanupError,
    PipelineError,
    ProviderFailureError,
    ScriptParseError,
    SynthesisFailureError,
    TranscriptMissingError,
)
from .orchestrator import run_episode_pipeline
from .trigger import GenerateEpisodeRequest, VoiceConfig
from .worker import EpisodeWorker, JobAlreadyRunningError, build_context

__all__ = [
    # Orchestration
    "EpisodeWorker",
    "GenerateEpisodeRequest",
    "JobAlreadyRunningError",
    "JobSettings",
    "PipelineConfig",
    "PipelineContext",
    "VoiceConfig",
    "build_context",
    "run_episode_pipeline",
    # Errors
    "AssemblyError",
    "CleanupError",
    "PipelineError",
    "ProviderFailureError",
    "ScriptParseError",
    "SynthesisFailureError",
    "TranscriptMissingError",
]
