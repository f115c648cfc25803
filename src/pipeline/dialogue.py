"""
Two-host dialogue script parsing and validation.

Model output is expected to be a JSON array of ``{"speaker": "A"|"B", "text": ...}``
objects, but it often arrives wrapped in markdown fences or surrounded by prose.
Parsing tries a fixed list of strategies; the first payload that passes strict
schema validation wins.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Annotated, Callable, List, Literal, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .errors import ScriptParseError
from .summary_length import count_words, truncate_to_word_limit


logger = logging.getLogger("pipeline")

BRACKETED_ARRAY = re.compile(r"\[[\s\S]*\]")
LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
TRAILING_FENCE = re.compile(r"\s*```\s*$")

_LABELS = r"(?:HOST\s*SLICE|PODSLICE\s*GUEST|HOST|GUEST|A|B)"
LEADING_SPEAKER_LABEL = re.compile(rf"^\s*{_LABELS}\s*[:\-–]\s*", re.IGNORECASE)
INLINE_SPEAKER_LABEL = re.compile(rf"\s*\b{_LABELS}\.(?=\s|$)", re.IGNORECASE)


class DialogueLine(BaseModel):
    """One spoken line of a two-host script."""

    speaker: Literal["A", "B"]
    text: str = Field(min_length=1)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject blank lines."""
        v = v.strip()
        if not v:
            raise ValueError("text cannot be blank")
        return v


DialogueScript = TypeAdapter(Annotated[List[DialogueLine], Field(min_length=1)])


@dataclass
class DialogueParseResult:
    """Outcome of parsing raw model output: either ``lines`` or ``errors``."""

    lines: Optional[List[DialogueLine]]
    strategy: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.lines is not None


def _direct(raw: str) -> Optional[str]:
    return raw


def _bracketed(raw: str) -> Optional[str]:
    match = BRACKETED_ARRAY.search(raw)
    return match.group(0) if match else None


def _unfenced(raw: str) -> Optional[str]:
    return TRAILING_FENCE.sub("", LEADING_FENCE.sub("", raw))


PARSE_STRATEGIES: tuple[tuple[str, Callable[[str], Optional[str]]], ...] = (
    ("direct", _direct),
    ("bracketed", _bracketed),
    ("unfenced", _unfenced),
)


def try_parse_dialogue(raw: str) -> DialogueParseResult:
    """
    Run every parsing strategy in order and return the first valid script.

    A payload that is valid JSON but fails schema validation (wrong speaker,
    missing or blank text, empty array) counts as a failed strategy.
    """
    errors: List[str] = []
    for name, extract in PARSE_STRATEGIES:
        payload = extract(raw or "")
        if payload is None:
            errors.append(f"{name}: no candidate")
            continue
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            errors.append(f"{name}: invalid JSON ({e.msg})")
            continue
        try:
            lines = DialogueScript.validate_python(data)
        except ValidationError as e:
            errors.append(f"{name}: schema validation failed ({e.error_count()} errors)")
            continue
        return DialogueParseResult(lines=lines, strategy=name, errors=errors)

    return DialogueParseResult(lines=None, errors=errors)


def parse_dialogue_script(raw: str) -> List[DialogueLine]:
    """
    Parse model output into an ordered list of dialogue lines.

    Raises:
        ScriptParseError: If no strategy yields a valid script
    """
    result = try_parse_dialogue(raw)
    if not result.success:
        logger.error(f"Dialogue script could not be parsed: {'; '.join(result.errors)}")
        raise ScriptParseError(
            "Dialogue script is not a valid JSON array of {speaker, text}: "
            + "; ".join(result.errors)
        )
    if result.strategy != "direct":
        logger.info(f"Dialogue script parsed with the {result.strategy} strategy")
    return result.lines


def sanitize_speaker_labels(text: str) -> str:
    """
    Remove speaker labels the model wrote into spoken text.

    Example:
        >>> sanitize_speaker_labels("HOST: Welcome back. Over to you, B.")
        'Welcome back. Over to you,'
    """
    cleaned = LEADING_SPEAKER_LABEL.sub("", text, count=1).strip()
    return INLINE_SPEAKER_LABEL.sub("", cleaned).strip()


def enforce_dialogue_word_limit(lines: List[DialogueLine], max_words: int) -> List[DialogueLine]:
    """
    Keep whole lines until the word budget is reached.

    The line crossing the budget is cut with ``truncate_to_word_limit`` and
    every later line is dropped.
    """
    kept: List[DialogueLine] = []
    remaining = max_words
    for line in lines:
        if remaining <= 0:
            break
        words = count_words(line.text)
        if words <= remaining:
            kept.append(line)
            remaining -= words
            continue
        text = truncate_to_word_limit(line.text, remaining).strip()
        if text:
            kept.append(DialogueLine(speaker=line.speaker, text=text))
        break

    if len(kept) < len(lines):
        logger.info(f"Dialogue trimmed from {len(lines)} to {len(kept)} lines ({max_words} words max)")
    return kept
