import logging
from typing import Optional

from src.db import JobStore


logger = logging.getLogger("pipeline")


# Progress messages shown to users polling the job record
STARTING = "Getting started - preparing your episode for processing..."
LOADING_TRANSCRIPT = "Loading your video transcript..."
SUMMARIZING = "Analyzing content and extracting key insights..."
SUMMARIZING_BACKUP = "Using backup service to analyze content and extract key insights..."
WRITING_SCRIPT = "Writing your episode script..."
WRITING_DIALOGUE = "Crafting an engaging two-host conversation script..."
WRITING_SCRIPT_BACKUP = "Using backup service to write your script..."
CONVERTING = "Converting script to audio with your selected voice..."
CONVERTING_DIALOGUE = "Converting dialogue to audio with your selected voices..."
ASSEMBLING = "Stitching audio segments together into your final episode..."


def chunk_progress(index: int, total: int) -> str:
    """Message for chunk ``index`` (0-based) of ``total``."""
    return f"Generating audio (part {index + 1} of {total})..."


class ProgressReporter:
    """
    Writes the job's progress message.

    The orchestrator creates one reporter per run and hands it to every
    stage, so the job record is only touched through this object and the
    orchestrator itself.
    """

    def __init__(self, job_store: JobStore, job_id: str):
        self.job_store = job_store
        self.job_id = job_id
        self.last_message: Optional[str] = None

    def report(self, message: str) -> None:
        if message == self.last_message:
            return
        self.job_store.update(self.job_id, progress_message=message)
        self.last_message = message
        logger.info(f"[{self.job_id}] {message}")
