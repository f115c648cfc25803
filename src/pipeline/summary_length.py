"""
Summary length tiers.

Each tier fixes the target duration, the script word bounds and the number of
usage credits an episode of that length costs. Script generation reads its
bounds from ``SUMMARY_LENGTH_OPTIONS``; nothing else hard-codes them.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from src.db.models import SummaryLength


@dataclass(frozen=True)
class SummaryLengthConfig:
    minutes: tuple[int, int]
    words: tuple[int, int]
    label: str
    description: str
    usage_count: int

    @property
    def min_words(self) -> int:
        return self.words[0]

    @property
    def max_words(self) -> int:
        return self.words[1]


SUMMARY_LENGTH_OPTIONS: dict[SummaryLength, SummaryLengthConfig] = {
    SummaryLength.SHORT: SummaryLengthConfig(
        minutes=(1, 2),
        words=(150, 280),
        label="Quick Slice (1-2 mins)",
        description="Perfect for a quick overview",
        usage_count=1,
    ),
    SummaryLength.MEDIUM: SummaryLengthConfig(
        minutes=(3, 4),
        words=(420, 560),
        label="Standard Summary (3-4 mins)",
        description="Balanced depth and brevity",
        usage_count=1,
    ),
    SummaryLength.LONG: SummaryLengthConfig(
        minutes=(5, 7),
        words=(700, 980),
        label="Deep Dive (5-7 mins)",
        description="Comprehensive coverage",
        usage_count=2,
    ),
}

DEFAULT_SUMMARY_LENGTH = SummaryLength.MEDIUM

SENTENCE_TERMINATORS = (".", "?", "!")


def parse_summary_length(value: Union[str, SummaryLength, None]) -> Optional[SummaryLength]:
    """Return the tier named by ``value``, or None if it is missing or invalid."""
    if isinstance(value, SummaryLength):
        return value
    if isinstance(value, str):
        try:
            return SummaryLength(value.strip().upper())
        except ValueError:
            return None
    return None


def resolve_summary_length(*candidates: Union[str, SummaryLength, None]) -> SummaryLength:
    """
    Return the first valid tier among ``candidates``, else MEDIUM.

    Example:
        >>> resolve_summary_length(None, "long")
        <SummaryLength.LONG: 'LONG'>
        >>> resolve_summary_length("XL")
        <SummaryLength.MEDIUM: 'MEDIUM'>
    """
    for candidate in candidates:
        tier = parse_summary_length(candidate)
        if tier is not None:
            return tier
    return DEFAULT_SUMMARY_LENGTH


def get_summary_length_config(length: Union[str, SummaryLength, None]) -> SummaryLengthConfig:
    return SUMMARY_LENGTH_OPTIONS[resolve_summary_length(length)]


def count_words(text: str) -> int:
    return len(text.split())


def truncate_to_word_limit(text: str, max_words: int) -> str:
    """
    Cut ``text`` to at most ``max_words`` words.

    Text within the limit is returned unchanged. Otherwise the first
    ``max_words`` words are kept (joined by single spaces) and the result is
    cut after the last sentence terminator, if the kept span contains one.
    """
    words = text.split()
    if len(words) <= max_words:
        return text

    truncated = " ".join(words[:max_words])
    last_end = max(truncated.rfind(t) for t in SENTENCE_TERMINATORS)
    if last_end >= 0:
        truncated = truncated[: last_end + 1]
    return truncated


def calculate_weighted_usage(summary_lengths: Iterable[Union[str, SummaryLength, None]]) -> int:
    """
    Total usage credits of a collection of episodes.

    Missing or invalid tiers count as MEDIUM.

    Example:
        >>> calculate_weighted_usage(["SHORT", "LONG", None])
        4
    """
    return sum(get_summary_length_config(length).usage_count for length in summary_lengths)


@dataclass(frozen=True)
class CreditCheck:
    can_create: bool
    remaining_credits: int
    required_credits: int
    remaining_after_creation: int


def can_create_episode(
    current_usage: int, requested_length: Union[str, SummaryLength], episode_limit: int
) -> CreditCheck:
    """Check whether a user with ``current_usage`` credits used can afford ``requested_length``."""
    required = get_summary_length_config(requested_length).usage_count
    remaining = episode_limit - current_usage
    can_create = remaining >= required
    return CreditCheck(
        can_create=can_create,
        remaining_credits=remaining,
        required_credits=required,
        remaining_after_creation=remaining - required if can_create else remaining,
    )


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def get_insufficient_credits_message(
    current_usage: int, requested_length: Union[str, SummaryLength], episode_limit: int
) -> str:
    check = can_create_episode(current_usage, requested_length, episode_limit)
    label = get_summary_length_config(requested_length).label.lower()
    return (
        f"Creating this {label} episode would exceed your limit. "
        f"You have {_plural(check.remaining_credits, 'credit')} remaining, "
        f"but this episode requires {_plural(check.required_credits, 'credit')}."
    )
