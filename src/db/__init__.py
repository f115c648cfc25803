"""
Database package for the episode generation pipeline.

Structure:
- models.py: SQLAlchemy ORM models (EpisodeJob, Notification, EmailOutbox)
- database.py: Engine/session factory, get_db_session() and the JobStore

Usage:
    from src.db import JobStore, JobStatus, get_db_session
"""

from .models import (
    Base,
    EmailOutbox,
    EpisodeJob,
    GenerationMode,
    JobStatus,
    Notification,
    SummaryLength,
    TimestampMixin,
    is_valid_transition,
)
from .database import (
    InvalidTransitionError,
    JobNotFoundError,
    JobStore,
    check_database_connection,
    configure_database,
    create_session_factory,
    get_db_session,
    get_session_factory,
    init_database,
    validate_database_url,
)

__all__ = [
    # Models
    "Base",
    "EmailOutbox",
    "EpisodeJob",
    "GenerationMode",
    "JobStatus",
    "Notification",
    "SummaryLength",
    "TimestampMixin",
    "is_valid_transition",
    # Database utilities
    "InvalidTransitionError",
    "JobNotFoundError",
    "JobStore",
    "check_database_connection",
    "configure_database",
    "create_session_factory",
    "get_db_session",
    "get_session_factory",
    "init_database",
    "validate_database_url",
]
