import logging
import os
from typing import Optional

from dotenv import load_dotenv
from elevenlabs.client import ElevenLabs

from .audio import AudioFormat, pcm_to_wav
from .base import SpeechProvider
from .voices import elevenlabs_voice_for


logger = logging.getLogger("tts")


def get_elevenlabs_client() -> ElevenLabs:
    """Get configured ElevenLabs client.

    Raises:
        ValueError: If ELEVENLABS_API_KEY not found
    """
    load_dotenv()
    api_key = os.getenv("ELEVENLABS_API_KEY")
    if not api_key:
        raise ValueError("ELEVENLABS_API_KEY not found in environment variables")
    return ElevenLabs(api_key=api_key)


class ElevenLabsSpeechProvider(SpeechProvider):
    """
    Backup TTS provider.

    Audio is requested as raw PCM at the job sample rate so chunks from both
    providers share one format and can be concatenated frame by frame.
    """

    name = "elevenlabs"

    def __init__(
        self,
        model: str = "eleven_flash_v2_5",
        client: Optional[ElevenLabs] = None,
        audio_format: AudioFormat = AudioFormat(),
    ):
        if audio_format.channels != 1 or audio_format.sample_width != 2:
            raise ValueError("ElevenLabs PCM output is 16-bit mono only")
        super().__init__(audio_format)
        self.model = model
        self._client = client

    @property
    def client(self) -> ElevenLabs:
        if self._client is None:
            self._client = get_elevenlabs_client()
        return self._client

    def synthesize(self, text: str, voice_id: str) -> bytes:
        native_voice = elevenlabs_voice_for(voice_id)
        stream = self.client.text_to_speech.convert(
            voice_id=native_voice,
            text=text,
            model_id=self.model,
            output_format=f"pcm_{self.audio_format.sample_rate}",
        )
        pcm = b"".join(stream)
        if not pcm:
            raise RuntimeError(f"ElevenLabs returned no audio for voice {native_voice}")

        logger.debug(f"ElevenLabs produced {len(pcm)} PCM bytes with voice {native_voice}")
        return pcm_to_wav(pcm, self.audio_format)
