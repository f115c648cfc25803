from abc import ABC, abstractmethod

from .audio import AudioFormat


class SpeechProvider(ABC):
    """
    Interface of a text-to-speech provider.

    ``synthesize`` takes a logical voice id from the voice catalogue and
    returns a complete WAV file in ``audio_format``. Any exception counts as a
    failure of this provider.
    """

    name: str = "speech-provider"

    def __init__(self, audio_format: AudioFormat = AudioFormat()):
        self.audio_format = audio_format

    @abstractmethod
    def synthesize(self, text: str, voice_id: str) -> bytes:
        """Return WAV bytes of ``text`` spoken with ``voice_id``."""

    def __repr__(self):
        return f"<{type(self).__name__}(name={self.name})>"
