"""
Voice catalogue.

Jobs store a logical voice id (e.g. "Strategist"). Each speech provider
resolves it to its own native voice: a Gemini prebuilt voice name or an
ElevenLabs voice id.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class VoiceOption:
    id: str
    label: str
    gemini_voice: str
    elevenlabs_voice_id: str


VOICE_OPTIONS: tuple[VoiceOption, ...] = (
    VoiceOption("Strategist", "The Strategist (Deep/Steady)", "Algieba", "gs0tAILXbY5DNrJrsM6F"),
    VoiceOption("Newsroom", "The Newsroom (Fast/Daily)", "Rasalgethi", "kPzsL2i3teMYv0FxEYQ6"),
    VoiceOption(
        "TechnicalLead", "The Technical Lead (Precise/Clear)", "Autonoe", "zZLmKvCp1i04X8E0FJ8B"
    ),
    VoiceOption("Analyst", "The Analyst (Rough/Direct)", "Sadaltager", "zZLmKvCp1i04X8E0FJ8B"),
    VoiceOption("Presenter", "The Presenter (High/Energetic)", "Aoede", "zZLmKvCp1i04X8E0FJ8B"),
)

VOICE_IDS = tuple(v.id for v in VOICE_OPTIONS)

DEFAULT_VOICE_A = VOICE_OPTIONS[0].id
DEFAULT_VOICE_B = VOICE_OPTIONS[1].id
DEFAULT_ELEVENLABS_VOICE_ID = "ucgJ8SdlW1CZr9MIm8BP"


def get_voice_by_id(voice_id: Optional[str]) -> Optional[VoiceOption]:
    return next((v for v in VOICE_OPTIONS if v.id == voice_id), None)


def gemini_voice_for(voice_id: str) -> str:
    """Gemini voice name; unknown ids are assumed to already be Gemini names."""
    voice = get_voice_by_id(voice_id)
    return voice.gemini_voice if voice else voice_id


def elevenlabs_voice_for(voice_id: str) -> str:
    voice = get_voice_by_id(voice_id)
    return voice.elevenlabs_voice_id if voice else DEFAULT_ELEVENLABS_VOICE_ID
