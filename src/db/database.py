"""
Database engine, session management and job store.

This module provides:
- Lazily created engine/session factory (configured from DATABASE_URL)
- Session-per-operation pattern through the get_db_session() context manager
- NullPool connection pooling and SQLite optimization settings (WAL mode,
  foreign keys, timeouts)
- JobStore: read / small partial updates of the episode job record
"""

import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional
from urllib.parse import urlparse

import uuid_utils as uuid
from dotenv import load_dotenv
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

from .models import (
    Base,
    EpisodeJob,
    GenerationMode,
    JobStatus,
    SummaryLength,
    is_valid_transition,
)
from src.logger import setup_logging, log_function


db_logger = setup_logging(logger_name="database")

DEFAULT_DATABASE_URL = "sqlite:///data/episodes.db"
SUPPORTED_SCHEMES = ("sqlite", "postgresql")

_session_factory: Optional[sessionmaker] = None
_factory_lock = threading.Lock()


class JobNotFoundError(LookupError):
    """Raised when a job id does not exist in the job store."""

    def __init__(self, job_id: str):
        super().__init__(f"Episode job {job_id} not found")
        self.job_id = job_id


class InvalidTransitionError(ValueError):
    """Raised on a status move the job state machine does not allow."""

    def __init__(self, job_id: str, current: JobStatus, target: JobStatus):
        super().__init__(
            f"Invalid status transition for job {job_id}: {current.value} -> {target.value}"
        )
        self.job_id = job_id
        self.current = current
        self.target = target


def validate_database_url(url: Optional[str]) -> tuple[bool, str]:
    """Validate the database URL format and, for SQLite, the file location."""
    if not url:
        return False, "DATABASE_URL is empty"
    try:
        parsed = urlparse(url)
        scheme = parsed.scheme.split("+", 1)[0]
        if scheme not in SUPPORTED_SCHEMES:
            return False, f"Unsupported database scheme: {parsed.scheme}"

        if scheme != "sqlite":
            return True, url

        # sqlite:///relative.db -> "relative.db", sqlite:////abs.db -> "/abs.db"
        db_path = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
        if not db_path or db_path == ":memory:":
            return False, "SQLite database file path is empty"

        parent_dir = Path(db_path).parent
        if not parent_dir.exists():
            return False, f"Database directory does not exist: {parent_dir}"

        return True, db_path

    except ValueError as e:
        return False, f"Invalid database URL format: {e}"


def optimize_sqlite_connection(dbapi_connection, connection_record):
    """Apply SQLite-specific optimizations when connection is created."""
    cursor = dbapi_connection.cursor()

    # WAL lets the pollers read while a worker writes
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA synchronous=NORMAL")

    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for ``database_url``.

    Raises:
        ValueError: If the URL is not usable
    """
    is_valid, db_info = validate_database_url(database_url)
    if not is_valid:
        db_logger.error(f"Database configuration error: {db_info}")
        raise ValueError(f"Database configuration error: {db_info}")

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            poolclass=NullPool,
            echo=False,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        event.listen(engine, "connect", optimize_sqlite_connection)
    else:
        engine = create_engine(database_url, pool_pre_ping=True, echo=False)

    db_logger.info(f"Database engine created: {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(database_url: str) -> sessionmaker:
    """Build a session factory bound to a new engine for ``database_url``."""
    engine = create_db_engine(database_url)
    # Snapshots returned by the JobStore stay readable after commit
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )


def configure_database(database_url: Optional[str] = None) -> sessionmaker:
    """
    Configure the process-wide session factory.

    Args:
        database_url: Explicit URL; defaults to DATABASE_URL from the environment
    """
    global _session_factory
    if database_url is None:
        load_dotenv()
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    with _factory_lock:
        _session_factory = create_session_factory(database_url)
    return _session_factory


def get_session_factory() -> sessionmaker:
    """Return the process-wide session factory, configuring it on first use."""
    if _session_factory is None:
        return configure_database()
    return _session_factory


@contextmanager
def get_db_session(
    session_factory: Optional[sessionmaker] = None,
) -> Generator[Session, None, None]:
    """
    Context manager for database sessions (session-per-operation pattern).

    Usage:
        with get_db_session() as session:
            session.add(job)
            session.commit()
    """
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session

    except OperationalError as e:
        db_logger.error(f"Database operational error: {e}")
        session.rollback()

        error_msg = str(e.orig) if getattr(e, "orig", None) is not None else str(e)
        if "database is locked" in error_msg.lower():
            raise OperationalError(
                "Database is locked. Another process may hold a long write transaction.",
                None,
                e.orig,
            )
        elif "no such table" in error_msg.lower():
            raise OperationalError(
                "Database table does not exist. Run `python -m src.pipeline init-db` first.",
                None,
                e.orig,
            )
        raise

    except SQLAlchemyError as e:
        db_logger.error(f"Database error: {e}")
        session.rollback()
        raise

    except Exception:
        session.rollback()
        raise

    finally:
        session.close()


@log_function(logger_name="database", log_execution_time=True)
def check_database_connection(session_factory: Optional[sessionmaker] = None) -> bool:
    """Return True if a trivial query succeeds."""
    try:
        with get_db_session(session_factory) as session:
            session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        db_logger.error(f"Database connection test failed: {e}")
        return False


@log_function(logger_name="database", log_execution_time=True)
def init_database(session_factory: Optional[sessionmaker] = None) -> bool:
    """
    Create all tables defined in the models.

    Returns:
        bool: True if initialization successful, False otherwise
    """
    factory = session_factory or get_session_factory()
    try:
        Base.metadata.create_all(bind=factory.kw["bind"])
        db_logger.info("Database tables created successfully")
        return True
    except SQLAlchemyError as e:
        db_logger.error(f"Failed to initialize database: {e}")
        return False


# Columns the pipeline may write after creation
UPDATABLE_FIELDS = frozenset(
    {
        "status",
        "progress_message",
        "summary",
        "script",
        "summary_length",
        "voice_a",
        "voice_b",
        "final_audio_ref",
        "duration_seconds",
        "failure_reason",
        "notified_at",
    }
)

# Columns that may be written once and never overwritten
WRITE_ONCE_FIELDS = frozenset({"summary", "script"})


class JobStore:
    """
    Read and partially update episode job records.

    Every call opens its own short session, so a JobStore can be shared by
    worker threads. Each job has a single writer (its orchestrator run).
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._session_factory = session_factory

    @property
    def session_factory(self) -> sessionmaker:
        return self._session_factory or get_session_factory()

    def create(
        self,
        transcript: str,
        user_id: str,
        title: str = "Untitled episode",
        summary_length: Optional[SummaryLength] = None,
        generation_mode: GenerationMode = GenerationMode.SINGLE,
        voice_a: Optional[str] = None,
        voice_b: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> EpisodeJob:
        """Insert a PENDING job and return a detached snapshot of it."""
        job = EpisodeJob(
            id=job_id or str(uuid.uuid7()),
            user_id=user_id,
            title=title,
            status=JobStatus.PENDING,
            transcript=transcript,
            summary_length=summary_length,
            generation_mode=generation_mode,
            voice_a=voice_a,
            voice_b=voice_b,
        )
        with get_db_session(self.session_factory) as session:
            session.add(job)
            session.commit()
            session.expunge(job)
        db_logger.info(f"Created episode job {job.id} for user {user_id}")
        return job

    def read(self, job_id: str) -> EpisodeJob:
        """
        Return a detached snapshot of a job.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        with get_db_session(self.session_factory) as session:
            job = session.get(EpisodeJob, job_id)
            if job is None:
                raise JobNotFoundError(job_id)
            session.expunge(job)
            return job

    def update(self, job_id: str, **fields: Any) -> None:
        """
        Update only the given columns of one job.

        Passing ``None`` explicitly clears a column. A ``status`` field is
        checked against the job state machine. ``summary`` and ``script``
        can only be written while they are still empty.

        Raises:
            ValueError: On an unknown or immutable column, or a write to an
                already set write-once column
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: On a forbidden status move
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update job fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        write_once = sorted(WRITE_ONCE_FIELDS & set(fields))
        with get_db_session(self.session_factory) as session:
            if "status" in fields or write_once:
                current = (
                    session.query(EpisodeJob.status, EpisodeJob.summary, EpisodeJob.script)
                    .filter(EpisodeJob.id == job_id)
                    .one_or_none()
                )
                if current is None:
                    raise JobNotFoundError(job_id)
                already_set = [name for name in write_once if getattr(current, name) not in (None, "")]
                if already_set:
                    raise ValueError(
                        f"Job {job_id} fields are write-once and already set: {', '.join(already_set)}"
                    )
                if "status" in fields:
                    target = JobStatus(fields["status"])
                    if not is_valid_transition(current.status, target):
                        raise InvalidTransitionError(job_id, current.status, target)

            updated = (
                session.query(EpisodeJob)
                .filter(EpisodeJob.id == job_id)
                .update(fields, synchronize_session=False)
            )
            if updated == 0:
                raise JobNotFoundError(job_id)
            session.commit()

        db_logger.debug(f"Updated job {job_id}: {', '.join(sorted(fields))}")
