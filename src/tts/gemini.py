import logging
from typing import Optional

from google import genai
from google.genai import types

from src.llm.gemini import get_gemini_client
from src.llm.prompts import speech_prompt
from .audio import AudioFormat, pcm_to_wav
from .base import SpeechProvider
from .voices import gemini_voice_for


logger = logging.getLogger("tts")


class GeminiSpeechProvider(SpeechProvider):
    """Primary TTS provider. Gemini returns raw 24 kHz 16-bit mono PCM."""

    name = "gemini-tts"

    def __init__(
        self,
        model: str = "gemini-2.5-flash-preview-tts",
        client: Optional[genai.Client] = None,
        audio_format: AudioFormat = AudioFormat(),
    ):
        super().__init__(audio_format)
        self.model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = get_gemini_client()
        return self._client

    def synthesize(self, text: str, voice_id: str) -> bytes:
        voice_name = gemini_voice_for(voice_id)
        response = self.client.models.generate_content(
            model=self.model,
            contents=speech_prompt(text),
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(
                            voice_name=voice_name,
                        )
                    )
                ),
            ),
        )

        if not response.candidates or not response.candidates[0].content:
            raise RuntimeError(f"Gemini TTS returned no candidates for voice {voice_name}")
        parts = response.candidates[0].content.parts or []
        pcm = next(
            (p.inline_data.data for p in parts if p.inline_data and p.inline_data.data),
            None,
        )
        if not pcm:
            raise RuntimeError(f"Gemini TTS returned no audio for voice {voice_name}")

        logger.debug(f"Gemini TTS produced {len(pcm)} PCM bytes with voice {voice_name}")
        return pcm_to_wav(pcm, self.audio_format)
