"""Tests for pipeline configuration parsing."""

import pytest

from src.pipeline.config import PipelineConfig, parse_positive_int


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 120),
        ("", 120),
        ("150", 150),
        ('"150"', 150),
        ("'80'", 80),
        (" 90 ", 90),
        ("0", 120),
        ("-3", 120),
        ("lots", 120),
        ("12.5", 120),
    ],
)
def test_parse_positive_int(raw, expected):
    assert parse_positive_int(raw, 120) == expected


def test_minimum_is_enforced():
    assert parse_positive_int("2000", 18000, minimum=2001) == 18000
    assert parse_positive_int("2001", 18000, minimum=2001) == 2001


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.setattr("src.pipeline.config.load_dotenv", lambda: None)
    for name in (
        "GEMINI_GENAI_MODEL",
        "OPENAI_TEXT_MODEL",
        "GEMINI_TTS_MODEL",
        "ELEVENLABS_TTS_MODEL",
        "TTS_CHUNK_WORDS",
        "SUMMARY_CHUNK_CHAR_LIMIT",
        "SUMMARY_MAX_CHUNKS",
        "EPISODE_STORAGE_PREFIX",
        "STORAGE_BACKEND",
        "LOCAL_STORAGE_ROOT",
        "PIPELINE_MAX_WORKERS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_defaults(clean_env):
    assert PipelineConfig.from_env() == PipelineConfig()


def test_from_env_overrides(clean_env):
    clean_env.setenv("GEMINI_GENAI_MODEL", '"gemini-test"')
    clean_env.setenv("TTS_CHUNK_WORDS", "'200'")
    clean_env.setenv("SUMMARY_CHUNK_CHAR_LIMIT", "1500")
    clean_env.setenv("EPISODE_STORAGE_PREFIX", "/episodes/")
    clean_env.setenv("STORAGE_BACKEND", "cloud")
    clean_env.setenv("PIPELINE_MAX_WORKERS", "2")

    config = PipelineConfig.from_env()

    assert config.gemini_text_model == "gemini-test"
    assert config.tts_chunk_words == 200
    assert config.summary_chunk_char_limit == 18000
    assert config.storage_prefix == "episodes"
    assert config.storage_backend == "cloud"
    assert config.max_workers == 2
