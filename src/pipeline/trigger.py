"""Inbound trigger event starting one pipeline run."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.db import GenerationMode


class VoiceConfig(BaseModel):
    """Logical voice ids: ``voice_a`` narrates (single) or is host A (multi)."""

    model_config = ConfigDict(populate_by_name=True)

    voice_a: Optional[str] = Field(default=None, alias="voiceA")
    voice_b: Optional[str] = Field(default=None, alias="voiceB")


class GenerateEpisodeRequest(BaseModel):
    """
    Event ``{jobId, summaryLengthTier, voiceConfig, mode}``.

    ``summaryLengthTier`` is kept as received; an invalid value falls back to
    MEDIUM when the job runs. ``voiceConfig`` may be a single voice id.
    """

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId", min_length=1)
    summary_length_tier: Optional[str] = Field(default=None, alias="summaryLengthTier")
    voice_config: VoiceConfig = Field(default_factory=VoiceConfig, alias="voiceConfig")
    mode: Optional[GenerationMode] = None

    @field_validator("voice_config", mode="before")
    @classmethod
    def validate_voice_config(cls, v: Any) -> Any:
        """Accept a bare voice id or a [voiceA, voiceB] pair."""
        if v is None:
            return {}
        if isinstance(v, str):
            return {"voiceA": v}
        if isinstance(v, (list, tuple)):
            if len(v) > 2:
                raise ValueError("voiceConfig accepts at most two voices")
            return {"voiceA": v[0] if v else None, "voiceB": v[1] if len(v) > 1 else None}
        return v

    @field_validator("mode", mode="before")
    @classmethod
    def validate_mode(cls, v: Any) -> Any:
        """Accept any casing of single|multi."""
        if isinstance(v, str):
            return v.strip().lower()
        return v
