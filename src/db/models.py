"""
SQLAlchemy ORM models for the episode generation pipeline.

Models:
    EpisodeJob: The persisted unit of work (transcript in, narrated audio out)
    Notification: In-app notification shown to a user
    EmailOutbox: Email send request waiting for the external sender
    TimestampMixin: Provides automatic created_at/updated_at timestamps

Enums:
    JobStatus: Job lifecycle (PENDING -> PROCESSING -> COMPLETED | FAILED)
    SummaryLength: Target length tier of the generated episode
    GenerationMode: Single narrator or two-host dialogue
"""

from enum import Enum as PyEnum
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class TimestampMixin:
    """
    Mixin to add automatic timestamp tracking to models.

    Both fields use database-level defaults (func.now()) for consistency.
    """

    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


class JobStatus(str, PyEnum):
    """
    Lifecycle of an episode job.

    The status only moves forward: PENDING -> PROCESSING -> COMPLETED | FAILED.
    Progress inside PROCESSING is reported through ``progress_message`` and is
    not a status change.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Allowed status moves. Writing the current status again is not a move.
JOB_STATUS_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.PROCESSING, JobStatus.FAILED},
    JobStatus.PROCESSING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


def is_valid_transition(current: JobStatus, target: JobStatus) -> bool:
    """Return True if ``current -> target`` is allowed (or a no-op on non-terminal)."""
    if current == target:
        return not current.is_terminal
    return target in JOB_STATUS_TRANSITIONS[current]


class SummaryLength(str, PyEnum):
    """Length tier of a generated episode (see src.pipeline.summary_length)."""

    SHORT = "SHORT"
    MEDIUM = "MEDIUM"
    LONG = "LONG"


class GenerationMode(str, PyEnum):
    """Single narrator (one voice) or two-host dialogue (voices A and B)."""

    SINGLE = "single"
    MULTI = "multi"


class EpisodeJob(Base, TimestampMixin):
    """
    Represents one episode generation job and everything it produces.

    Attributes:
        id: Primary key, opaque identifier (UUID7 when created by the CLI)
        user_id: Owner of the job, recipient of notifications
        title: Display title used in notifications
        status: Current lifecycle status (JobStatus enum)
        progress_message: Human readable sub-step; cleared on COMPLETED
        transcript: Immutable input text
        summary: Neutral synopsis, written once
        script: Narrator text (str) or dialogue lines (list of {speaker, text})
        summary_length: Requested length tier (None means MEDIUM)
        generation_mode: single or multi
        voice_a: Narrator voice, or voice of host A
        voice_b: Voice of host B (multi mode only)
        final_audio_ref: URI of the assembled audio, set on completion
        duration_seconds: Duration of the assembled audio
        failure_reason: Internal error class name of a failed job
        notified_at: When the success/failure notification was emitted
    """

    __tablename__ = "episode_jobs"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False, default="Untitled episode")

    status = Column(
        Enum(JobStatus),
        nullable=False,
        default=JobStatus.PENDING,
        server_default="PENDING",
    )
    progress_message = Column(Text, nullable=True)

    # Inputs
    transcript = Column(Text, nullable=True)
    summary_length = Column(Enum(SummaryLength), nullable=True)
    generation_mode = Column(
        Enum(GenerationMode), nullable=False, default=GenerationMode.SINGLE
    )
    voice_a = Column(String, nullable=True)
    voice_b = Column(String, nullable=True)

    # Stage outputs (written once)
    summary = Column(Text, nullable=True)
    script = Column(JSON, nullable=True)

    # Final outputs
    final_audio_ref = Column(String, nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Diagnostics
    failure_reason = Column(String, nullable=True)
    notified_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return (
            f"<EpisodeJob(id={self.id}, user_id={self.user_id}, title='{self.title}', "
            f"status={self.status.value if self.status else None})>"
        )


class Notification(Base, TimestampMixin):
    """In-app notification written by the notification emitter."""

    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    job_id = Column(String, ForeignKey("episode_jobs.id"), nullable=True)
    type = Column(String, nullable=False)  # episode_ready | episode_failed
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)


class EmailOutbox(Base, TimestampMixin):
    """
    Email send request. Rows are delivered by a separate sender, which sets
    ``sent_at``; the pipeline only ever inserts.
    """

    __tablename__ = "email_outbox"

    id = Column(String, primary_key=True)
    template_kind = Column(String, nullable=False)  # episode.ready.email | episode.failed.email
    payload = Column(JSON, nullable=False)
    sent_at = Column(DateTime, nullable=True)
