"""Shared fixtures: temporary database and storage, scripted fake providers."""

import os
import tempfile
import zlib
from array import array
from typing import Callable, Optional

import pytest

# Keep module-level log files out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="episode-pipeline-logs-"))

from src.db import JobStore, create_session_factory, init_database  # noqa: E402
from src.llm import TextProvider  # noqa: E402
from src.pipeline.config import PipelineConfig  # noqa: E402
from src.pipeline.context import PipelineContext  # noqa: E402
from src.pipeline.notifications import NotificationEmitter, NotificationSink  # noqa: E402
from src.storage import LocalStorage  # noqa: E402
from src.tts import AudioFormat, SpeechProvider, pcm_to_wav  # noqa: E402


# 0.1 s of audio per spoken word at 24 kHz
FRAMES_PER_WORD = 2400

TEST_FORMAT = AudioFormat()


def sample_value_for(text: str) -> int:
    """Constant sample value a fake provider uses for ``text``."""
    return zlib.crc32(text.encode("utf-8")) % 30000 + 1


def make_wav(text: str, audio_format: AudioFormat = TEST_FORMAT) -> bytes:
    frames = max(1, len(text.split())) * FRAMES_PER_WORD
    samples = array("h", [sample_value_for(text)]) * (frames * audio_format.channels)
    return pcm_to_wav(samples.tobytes(), audio_format)


def sample_runs(pcm: bytes) -> list[int]:
    """Collapse 16-bit mono PCM into the sequence of its constant runs."""
    samples = array("h")
    samples.frombytes(pcm)
    runs: list[int] = []
    for value in samples:
        if not runs or runs[-1] != value:
            runs.append(value)
    return runs


def narration_text(sentences: int, words_per_sentence: int = 9) -> str:
    filler = ["explains", "one", "more", "useful", "idea", "for", "listeners", "today"]
    body = filler[: words_per_sentence - 3]
    return " ".join(
        f"Point {i} {' '.join(body)} now." for i in range(sentences)
    )


class FakeTextProvider(TextProvider):
    """Answers prompts with ``respond(prompt)``, or fails every call."""

    def __init__(self, name: str, respond: Optional[Callable[[str], str]] = None, fail: bool = False):
        self.name = name
        self.respond = respond or default_text_response
        self.fail = fail
        self.prompts: list[str] = []

    def generate(self, prompt: str, temperature: Optional[float] = None) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError(f"{self.name} is down")
        return self.respond(prompt)


def default_text_response(prompt: str) -> str:
    if prompt.startswith("You will summarize segment"):
        return "- a segment bullet"
    if prompt.startswith("Task: Produce a faithful"):
        return "- key idea one\n- key idea two\n\nA short neutral recap of the content."
    if "two-host podcast conversation" in prompt:
        return (
            '[{"speaker": "A", "text": "Welcome to the show."},'
            ' {"speaker": "B", "text": "Today we cover three ideas."},'
            ' {"speaker": "A", "text": "The first idea is focus."},'
            ' {"speaker": "B", "text": "And the last one is rest."}]'
        )
    return narration_text(20)


class FakeSpeechProvider(SpeechProvider):
    """Returns deterministic WAV audio; fails for texts matched by ``fail_when``."""

    def __init__(self, name: str, fail_when: Optional[Callable[[str], bool]] = None):
        super().__init__(TEST_FORMAT)
        self.name = name
        self.fail_when = fail_when or (lambda text: False)
        self.calls: list[tuple[str, str]] = []

    def synthesize(self, text: str, voice_id: str) -> bytes:
        self.calls.append((text, voice_id))
        if self.fail_when(text):
            raise RuntimeError(f"{self.name} cannot synthesize this text")
        return make_wav(text, self.audio_format)


class RecordingSink(NotificationSink):
    def __init__(self):
        self.in_app: list[tuple[str, str, str, Optional[str]]] = []
        self.emails: list[tuple[str, dict]] = []

    def notify_in_app(self, user_id, notification_type, message, job_id=None):
        self.in_app.append((user_id, notification_type, message, job_id))

    def enqueue_email(self, template_kind, payload):
        self.emails.append((template_kind, payload))


class RecordingJobStore(JobStore):
    """JobStore keeping a log of every partial update."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.updates: list[tuple[str, dict]] = []

    def update(self, job_id, **fields):
        self.updates.append((job_id, dict(fields)))
        super().update(job_id, **fields)

    def progress_messages(self, job_id: str) -> list:
        return [
            fields["progress_message"]
            for updated_id, fields in self.updates
            if updated_id == job_id and "progress_message" in fields
        ]


@pytest.fixture
def session_factory(tmp_path):
    factory = create_session_factory(f"sqlite:///{tmp_path / 'episodes.db'}")
    assert init_database(factory)
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def job_store(session_factory):
    return RecordingJobStore(session_factory)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "storage"))


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def config():
    return PipelineConfig(tts_chunk_words=120, storage_prefix="user-episodes")


@pytest.fixture
def text_providers():
    return [FakeTextProvider("primary-llm"), FakeTextProvider("backup-llm")]


@pytest.fixture
def speech_providers():
    return [FakeSpeechProvider("primary-tts"), FakeSpeechProvider("backup-tts")]


@pytest.fixture
def make_context(config, job_store, storage, sink, text_providers, speech_providers):
    """Build a PipelineContext, overriding any collaborator by keyword."""

    def _make(**overrides) -> PipelineContext:
        store = overrides.pop("job_store", job_store)
        values = dict(
            config=config,
            job_store=store,
            storage=storage,
            text_providers=text_providers,
            speech_providers=speech_providers,
            notifier=NotificationEmitter(overrides.pop("sink", sink), store),
        )
        values.update(overrides)
        return PipelineContext(**values)

    return _make
