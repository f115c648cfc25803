"""Tests for summary and script generation."""

import pytest

from conftest import FakeTextProvider, narration_text
from src.db import SummaryLength
from src.pipeline.config import PipelineConfig
from src.pipeline.dialogue import DialogueLine
from src.pipeline.errors import ProviderFailureError, ScriptParseError
from src.pipeline.summary_length import SUMMARY_LENGTH_OPTIONS, count_words
from src.pipeline.text_generation import (
    generate_dialogue_script,
    generate_narration_script,
    generate_summary,
    split_transcript,
)


MEDIUM = SUMMARY_LENGTH_OPTIONS[SummaryLength.MEDIUM]
SHORT = SUMMARY_LENGTH_OPTIONS[SummaryLength.SHORT]


class TestSplitTranscript:
    def test_short_transcript_is_not_split(self):
        assert split_transcript("abc" * 10, 100, 6) == ["abc" * 10]

    def test_slices_cover_the_transcript(self):
        transcript = "x" * 2500
        slices = split_transcript(transcript, 1000, 6)
        assert len(slices) == 3
        assert "".join(slices) == transcript

    def test_slice_count_is_capped(self):
        slices = split_transcript("y" * 10000, 1000, 4)
        assert len(slices) == 4
        assert all(len(s) == 2500 for s in slices)


class TestGenerateSummary:
    def test_single_call_for_short_transcript(self, config):
        provider = FakeTextProvider("primary")
        summary = generate_summary("A short transcript.", [provider], config)

        assert summary.startswith("- key idea one")
        assert len(provider.prompts) == 1
        assert provider.prompts[0].endswith("Transcript:\nA short transcript.")

    def test_long_transcript_is_summarized_in_segments(self):
        config = PipelineConfig(summary_chunk_char_limit=3000, summary_max_chunks=6)
        provider = FakeTextProvider("primary")

        generate_summary("z" * 7000, [provider], config)

        assert [p.split("\n")[0] for p in provider.prompts[:3]] == [
            f"You will summarize segment {i} of 3 of a longer transcript." for i in (1, 2, 3)
        ]
        assert len(provider.prompts) == 4
        assert "- a segment bullet\n- a segment bullet" in provider.prompts[3]

    def test_backup_reruns_the_whole_summary(self, config):
        primary = FakeTextProvider("primary", fail=True)
        backup = FakeTextProvider("backup")
        fallbacks = []

        summary = generate_summary("transcript", [primary, backup], config, fallbacks.append)

        assert summary
        assert fallbacks == [backup]

    def test_both_providers_failing(self, config):
        providers = [FakeTextProvider("p", fail=True), FakeTextProvider("b", fail=True)]
        with pytest.raises(ProviderFailureError):
            generate_summary("transcript", providers, config)


class TestNarrationScript:
    def test_over_long_script_is_truncated_at_sentence_end(self, config):
        provider = FakeTextProvider("primary", respond=lambda prompt: narration_text(100))

        script = generate_narration_script("summary", MEDIUM, [provider], config)

        assert count_words(script) == 558
        assert script.endswith(".")
        assert "420-560 word" in provider.prompts[0]

    def test_script_within_budget_is_kept(self, config):
        text = narration_text(20)
        provider = FakeTextProvider("primary", respond=lambda prompt: f"  {text}\n")
        assert generate_narration_script("summary", SHORT, [provider], config) == text


class TestDialogueScript:
    def test_parses_dialogue(self, config):
        lines = generate_dialogue_script("summary", MEDIUM, [FakeTextProvider("p")], config)
        assert lines[0] == DialogueLine(speaker="A", text="Welcome to the show.")
        assert [line.speaker for line in lines] == ["A", "B", "A", "B"]

    def test_dialogue_trimmed_to_budget(self, config):
        line = '{"speaker": "A", "text": "%s"}' % narration_text(10)
        provider = FakeTextProvider("p", respond=lambda prompt: f"[{line}, {line}, {line}, {line}]")

        lines = generate_dialogue_script("summary", SHORT, [provider], config)

        assert sum(count_words(line.text) for line in lines) <= SHORT.max_words
        assert len(lines) == 4
        assert count_words(lines[-1].text) == 9

    def test_unparseable_dialogue_does_not_fall_back(self, config):
        primary = FakeTextProvider("p", respond=lambda prompt: "Sorry, I can't do JSON.")
        backup = FakeTextProvider("b")

        with pytest.raises(ScriptParseError):
            generate_dialogue_script("summary", MEDIUM, [primary, backup], config)
        assert backup.prompts == []
