"""
Notification emitter.

On completion or terminal failure a job produces exactly one in-app
notification and one email request. Emission is fire-and-forget: errors are
logged and never reach the orchestrator.
"""

import datetime
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import uuid_utils as uuid
from sqlalchemy.orm import sessionmaker

from src.db import EmailOutbox, EpisodeJob, JobStore, Notification, get_db_session


logger = logging.getLogger("pipeline")

EPISODE_READY = "episode_ready"
EPISODE_FAILED = "episode_failed"
READY_EMAIL = "episode.ready.email"
FAILED_EMAIL = "episode.failed.email"


def ready_message(title: str) -> str:
    return f'Your generated episode "{title}" is ready.'


def failed_message(title: str) -> str:
    return (
        f'We\'re sorry, we hit a technical issue while generating your episode "{title}". '
        "Please try again later. If it keeps happening, contact support."
    )


class NotificationSink(ABC):
    """Destination of in-app notifications and email send requests."""

    @abstractmethod
    def notify_in_app(
        self, user_id: str, notification_type: str, message: str, job_id: Optional[str] = None
    ) -> None:
        """Record an in-app notification for ``user_id``."""

    @abstractmethod
    def enqueue_email(self, template_kind: str, payload: dict[str, Any]) -> None:
        """Request an email of ``template_kind`` rendered from ``payload``."""


class DatabaseNotificationSink(NotificationSink):
    """Writes notifications and email outbox rows to the application database."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self.session_factory = session_factory

    def notify_in_app(
        self, user_id: str, notification_type: str, message: str, job_id: Optional[str] = None
    ) -> None:
        with get_db_session(self.session_factory) as session:
            session.add(
                Notification(
                    id=str(uuid.uuid7()),
                    user_id=user_id,
                    job_id=job_id,
                    type=notification_type,
                    message=message,
                    is_read=False,
                )
            )
            session.commit()

    def enqueue_email(self, template_kind: str, payload: dict[str, Any]) -> None:
        with get_db_session(self.session_factory) as session:
            session.add(
                EmailOutbox(id=str(uuid.uuid7()), template_kind=template_kind, payload=payload)
            )
            session.commit()


class NotificationEmitter:
    """Emits the success or failure notifications of a job, at most once per job."""

    def __init__(self, sink: NotificationSink, job_store: JobStore):
        self.sink = sink
        self.job_store = job_store

    def notify_success(self, job: EpisodeJob) -> bool:
        return self._emit(job, EPISODE_READY, ready_message(job.title), READY_EMAIL)

    def notify_failure(self, job: EpisodeJob) -> bool:
        return self._emit(job, EPISODE_FAILED, failed_message(job.title), FAILED_EMAIL)

    def _emit(self, job: EpisodeJob, notification_type: str, message: str, email_kind: str) -> bool:
        """
        Claim the job's notification slot, then send both notifications.

        Returns:
            True if this call emitted the notifications
        """
        try:
            current = self.job_store.read(job.id)
            if current.notified_at is not None:
                logger.info(f"[{job.id}] Notifications already sent at {current.notified_at}")
                return False
            # At most once: the slot is claimed before anything is sent
            self.job_store.update(job.id, notified_at=datetime.datetime.now(datetime.timezone.utc))
        except Exception as e:
            logger.error(f"[{job.id}] Could not claim notification slot: {e}", exc_info=True)
            return False

        sent = True
        try:
            self.sink.notify_in_app(job.user_id, notification_type, message, job_id=job.id)
        except Exception as e:
            sent = False
            logger.error(f"[{job.id}] In-app notification failed: {e}", exc_info=True)
        try:
            self.sink.enqueue_email(email_kind, {"userEpisodeId": job.id})
        except Exception as e:
            sent = False
            logger.error(f"[{job.id}] Email request failed: {e}", exc_info=True)

        if sent:
            logger.info(f"[{job.id}] Sent {notification_type} notifications")
        return sent
