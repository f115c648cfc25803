"""Tests for trigger event validation and job settings resolution."""

import pytest
from pydantic import ValidationError

from src.db import GenerationMode, JobStatus, SummaryLength
from src.pipeline.orchestrator import resolve_job_settings
from src.pipeline.trigger import GenerateEpisodeRequest


def test_full_event():
    request = GenerateEpisodeRequest.model_validate(
        {
            "jobId": "job-1",
            "summaryLengthTier": "LONG",
            "voiceConfig": {"voiceA": "Analyst", "voiceB": "Presenter"},
            "mode": "Multi",
        }
    )
    assert request.job_id == "job-1"
    assert request.summary_length_tier == "LONG"
    assert request.voice_config.voice_a == "Analyst"
    assert request.voice_config.voice_b == "Presenter"
    assert request.mode == GenerationMode.MULTI


@pytest.mark.parametrize(
    "voice_config, expected",
    [
        (None, (None, None)),
        ("Analyst", ("Analyst", None)),
        (["Analyst"], ("Analyst", None)),
        (["Analyst", "Presenter"], ("Analyst", "Presenter")),
        ({"voice_b": "Presenter"}, (None, "Presenter")),
    ],
)
def test_voice_config_shapes(voice_config, expected):
    request = GenerateEpisodeRequest.model_validate({"jobId": "j", "voiceConfig": voice_config})
    assert (request.voice_config.voice_a, request.voice_config.voice_b) == expected


@pytest.mark.parametrize(
    "event",
    [
        {},
        {"jobId": ""},
        {"jobId": "j", "mode": "trio"},
        {"jobId": "j", "voiceConfig": ["a", "b", "c"]},
    ],
)
def test_invalid_events(event):
    with pytest.raises(ValidationError):
        GenerateEpisodeRequest.model_validate(event)


class TestResolveJobSettings:
    def test_defaults(self, job_store):
        job = job_store.create("t", user_id="u")
        settings = resolve_job_settings(job)
        assert settings.summary_length == SummaryLength.MEDIUM
        assert settings.mode == GenerationMode.SINGLE
        assert (settings.voice_a, settings.voice_b) == ("Strategist", "Newsroom")

    def test_request_voices_override_job_voices(self, job_store):
        job = job_store.create("t", user_id="u", voice_a="Analyst", voice_b="Presenter")
        request = GenerateEpisodeRequest.model_validate({"jobId": job.id, "voiceConfig": "Newsroom"})
        settings = resolve_job_settings(job, request)
        assert (settings.voice_a, settings.voice_b) == ("Newsroom", "Presenter")

    def test_request_mode_overrides_job_mode(self, job_store):
        job = job_store.create("t", user_id="u", generation_mode=GenerationMode.MULTI)
        request = GenerateEpisodeRequest.model_validate({"jobId": job.id, "mode": "single"})
        assert resolve_job_settings(job, request).mode == GenerationMode.SINGLE

    def test_stored_script_fixes_mode(self, job_store):
        job = job_store.create("t", user_id="u")
        job_store.update(job.id, status=JobStatus.PROCESSING, script=[{"speaker": "A", "text": "Hi."}])
        request = GenerateEpisodeRequest.model_validate({"jobId": job.id, "mode": "single"})
        settings = resolve_job_settings(job_store.read(job.id), request)
        assert settings.mode == GenerationMode.MULTI
