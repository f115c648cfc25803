"""
Text-to-speech providers and audio helpers.

base.py : SpeechProvider interface
gemini.py : Gemini TTS (primary)
elevenlabs.py : ElevenLabs TTS (backup)
voices.py : Logical voice catalogue and per-provider mapping
audio.py : WAV wrapping, concatenation and duration
"""

from .audio import AudioFormat, concatenate_wavs, pcm_to_wav, read_wav, wav_duration_seconds
from .base import SpeechProvider
from .elevenlabs import ElevenLabsSpeechProvider
from .gemini import GeminiSpeechProvider
from .voices import (
    DEFAULT_VOICE_A,
    DEFAULT_VOICE_B,
    VOICE_IDS,
    VOICE_OPTIONS,
    VoiceOption,
    elevenlabs_voice_for,
    gemini_voice_for,
    get_voice_by_id,
)

__all__ = [
    "AudioFormat",
    "DEFAULT_VOICE_A",
    "DEFAULT_VOICE_B",
    "ElevenLabsSpeechProvider",
    "GeminiSpeechProvider",
    "SpeechProvider",
    "VOICE_IDS",
    "VOICE_OPTIONS",
    "VoiceOption",
    "concatenate_wavs",
    "elevenlabs_voice_for",
    "gemini_voice_for",
    "get_voice_by_id",
    "pcm_to_wav",
    "read_wav",
    "wav_duration_seconds",
]
