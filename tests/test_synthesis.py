"""Tests for script chunking and chunk synthesis."""

import pytest

from conftest import FakeSpeechProvider, narration_text
from src.pipeline.dialogue import DialogueLine
from src.pipeline.errors import SynthesisFailureError
from src.pipeline.synthesis import (
    chunk_key,
    final_audio_key,
    plan_dialogue_segments,
    plan_narration_segments,
    split_script_into_chunks,
    synthesize_chunks,
)


class TestSplitScript:
    def test_chunks_reconstruct_the_word_sequence(self):
        script = "  Hello   world.\nThis is\ta test of   chunking words. "
        chunks = split_script_into_chunks(script, 3)
        assert chunks == ["Hello world. This", "is a test", "of chunking words."]
        assert " ".join(chunks).split() == script.split()

    def test_chunk_count_for_long_script(self):
        script = narration_text(62)  # 558 words
        chunks = split_script_into_chunks(script, 120)
        assert len(chunks) == 5
        assert all(len(chunk.split()) <= 120 for chunk in chunks)
        assert " ".join(chunks) == " ".join(script.split())

    def test_empty_script_has_no_chunks(self):
        assert split_script_into_chunks("   ", 10) == []

    @pytest.mark.parametrize("words", [0, -5])
    def test_non_positive_chunk_size_is_rejected(self, words):
        with pytest.raises(ValueError):
            split_script_into_chunks("some words", words)


def test_storage_keys():
    assert chunk_key("user-episodes", "job-1", 3) == "user-episodes/job-1/temp-chunks/chunk-0003.wav"
    assert final_audio_key("user-episodes", "job-1") == "user-episodes/job-1.wav"


def test_plan_dialogue_segments_maps_speakers_and_strips_labels():
    lines = [
        DialogueLine(speaker="A", text="HOST: Welcome in."),
        DialogueLine(speaker="B", text="Thanks."),
        DialogueLine(speaker="A", text="B."),
    ]
    segments = plan_dialogue_segments(lines, "Strategist", "Newsroom")
    assert [(s.index, s.text, s.voice_id) for s in segments] == [
        (0, "Welcome in.", "Strategist"),
        (1, "Thanks.", "Newsroom"),
        (2, "B.", "Strategist"),
    ]


class TestSynthesizeChunks:
    def test_chunks_uploaded_in_order(self, storage):
        segments = plan_narration_segments(narration_text(10), "Strategist", 40)
        progress = []

        chunks = synthesize_chunks(
            "job-1",
            segments,
            [FakeSpeechProvider("primary")],
            storage,
            "user-episodes",
            on_progress=lambda i, n: progress.append((i, n)),
        )

        assert [c.index for c in chunks] == [0, 1, 2]
        assert progress == [(0, 3), (1, 3), (2, 3)]
        for chunk, segment in zip(chunks, segments):
            assert chunk.source_text == segment.text
            assert chunk.storage_ref == storage.make_ref(chunk_key("user-episodes", "job-1", chunk.index))
            assert storage.download(chunk.storage_ref)

    def test_stored_chunks_are_reused(self, storage):
        segments = plan_narration_segments(narration_text(10), "Strategist", 40)
        storage.upload(b"already synthesized", chunk_key("user-episodes", "job-1", 1))
        provider = FakeSpeechProvider("primary")

        synthesize_chunks("job-1", segments, [provider], storage, "user-episodes")

        assert [text for text, _ in provider.calls] == [segments[0].text, segments[2].text]

    def test_backup_provider_synthesizes_failed_segment(self, storage):
        segments = plan_narration_segments(narration_text(10), "Strategist", 40)
        primary = FakeSpeechProvider("primary", fail_when=lambda text: text == segments[1].text)
        backup = FakeSpeechProvider("backup")

        chunks = synthesize_chunks("job-1", segments, [primary, backup], storage, "user-episodes")

        assert len(chunks) == 3
        assert backup.calls == [(segments[1].text, "Strategist")]

    def test_failure_of_every_provider_names_the_chunk(self, storage):
        segments = plan_narration_segments(narration_text(10), "Strategist", 40)
        failing = lambda text: text == segments[2].text  # noqa: E731
        providers = [FakeSpeechProvider("primary", failing), FakeSpeechProvider("backup", failing)]

        with pytest.raises(SynthesisFailureError) as excinfo:
            synthesize_chunks("job-1", segments, providers, storage, "user-episodes")

        assert excinfo.value.chunk_index == 2
        assert not storage.exists(chunk_key("user-episodes", "job-1", 2))
