"""Tests for the command line interface."""

import argparse

import pytest

from src.db import JobStatus, JobStore
from src.pipeline import __main__ as cli


@pytest.fixture
def cli_env(tmp_path, monkeypatch, session_factory, make_context):
    """Point the CLI at the test database and the fake providers."""
    monkeypatch.setenv("DATABASE_URL", str(session_factory.kw["bind"].url))
    monkeypatch.setattr("src.db.database._session_factory", None)
    monkeypatch.setattr(cli, "build_context", lambda config: make_context())
    transcript = tmp_path / "talk.txt"
    transcript.write_text("A talk about focus and deep work. " * 40, encoding="utf-8")
    return transcript


def test_validate_voice_is_case_insensitive():
    assert cli.validate_voice("analyst") == "Analyst"
    assert cli.validate_voice(None) is None
    with pytest.raises(argparse.ArgumentTypeError):
        cli.validate_voice("Morgan Freeman")


def test_unknown_voice_exits_with_usage_error():
    with pytest.raises(SystemExit):
        cli.parse_arguments(["run", "--job-id", "j", "--voice-a", "nobody"])


def test_init_db(cli_env, capsys):
    assert cli.main(["init-db"]) == 0
    assert "Database tables created" in capsys.readouterr().out


def test_submit_without_running(cli_env, session_factory, capsys):
    code = cli.main(
        [
            "submit",
            "--transcript-file",
            str(cli_env),
            "--title",
            "Focus",
            "--summary-length",
            "short",
            "--mode",
            "multi",
            "--voice-a",
            "presenter",
            "--no-run",
        ]
    )

    assert code == 0
    job_id = capsys.readouterr().out.strip().split()[-1]
    job = JobStore(session_factory).read(job_id)
    assert job.status == JobStatus.PENDING
    assert job.title == "Focus"
    assert job.voice_a == "Presenter"


def test_submit_and_run(cli_env, session_factory, capsys):
    assert cli.main(["submit", "--transcript-file", str(cli_env)]) == 0

    out = capsys.readouterr().out
    assert "Status:     COMPLETED" in out
    assert "Duration:" in out


def test_run_and_status_of_existing_job(cli_env, job_store, capsys):
    job = job_store.create("A talk about focus. " * 40, user_id="u", title="Existing")

    assert cli.main(["run", "--job-id", job.id, "--summary-length", "LONG"]) == 0
    assert cli.main(["status", "--job-id", job.id]) == 0

    out = capsys.readouterr().out
    assert "Length:     LONG" in out


def test_failed_job_exits_non_zero(cli_env, job_store):
    job = job_store.create("", user_id="u")
    assert cli.main(["run", "--job-id", job.id]) == 1
    assert job_store.read(job.id).failure_reason == "TranscriptMissingError"


def test_missing_job(cli_env, capsys):
    assert cli.main(["status", "--job-id", "missing"]) == 1
    assert "not found" in capsys.readouterr().err


def test_missing_transcript_file(cli_env, tmp_path):
    assert cli.main(["submit", "--transcript-file", str(tmp_path / "nope.txt")]) == 1


def test_init_db_reports_unreachable_database(cli_env, monkeypatch, capsys):
    monkeypatch.setattr(cli, "check_database_connection", lambda: False)
    monkeypatch.setattr(cli, "init_database", lambda: pytest.fail("tables created without a connection"))

    assert cli.main(["init-db"]) == 1
    assert "Cannot connect to the database" in capsys.readouterr().err
