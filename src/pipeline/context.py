from dataclasses import dataclass
from typing import Sequence

from src.db import GenerationMode, JobStore, SummaryLength
from src.llm import TextProvider
from src.storage import BaseStorage
from src.tts import SpeechProvider
from .config import PipelineConfig
from .notifications import NotificationEmitter
from .summary_length import SummaryLengthConfig, get_summary_length_config


@dataclass
class PipelineContext:
    """Collaborators of a pipeline run. Shared by every job of a worker."""

    config: PipelineConfig
    job_store: JobStore
    storage: BaseStorage
    text_providers: Sequence[TextProvider]
    speech_providers: Sequence[SpeechProvider]
    notifier: NotificationEmitter


@dataclass(frozen=True)
class JobSettings:
    """Generation settings of one job, resolved from the job record and its trigger."""

    summary_length: SummaryLength
    mode: GenerationMode
    voice_a: str
    voice_b: str

    @property
    def length_config(self) -> SummaryLengthConfig:
        return get_summary_length_config(self.summary_length)
