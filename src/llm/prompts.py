"""Prompt templates for summary and script generation."""

# First line of every generated script, spoken verbatim.
BRAND_OPENER = (
    "Feeling lost in the noise? This summary is brought to you by Podslice. "
    "We filter out the fluff, the filler, and the drawn-out discussions, leaving you "
    "with pure, actionable knowledge. In a world full of chatter, we help you find the insight."
)


def summary_prompt(body: str) -> str:
    """
    Returns the prompt producing the final objective summary.

    Args:
        body: Either "Transcript:\\n..." or the consolidated segment bullets
    """
    return (
        "Task: Produce a faithful, objective summary of this content's key ideas.\n\n"
        "Constraints:\n"
        "- Do NOT imitate the original speakers or style.\n"
        "- Do NOT write a script or dialogue.\n"
        "- No stage directions, no timestamps.\n"
        "- Focus on core concepts, arguments, evidence, and takeaways.\n\n"
        "Format:\n"
        "1) 5-10 bullet points of key highlights (short, punchy).\n"
        "2) A 4-5 sentence narrative recap synthesizing the big picture.\n\n"
        f"{body}"
    )


def transcript_body(transcript: str) -> str:
    return f"Transcript:\n{transcript}"


def consolidated_bullets_body(bullets: list[str]) -> str:
    joined = "\n".join(bullets)
    return (
        "Here are bullet point extracts from segmented transcript pieces "
        "(deduplicate & merge conceptually related items):\n\n"
        f"{joined}"
    )


def summary_segment_prompt(index: int, total: int, segment: str) -> str:
    """Returns the map-step prompt for segment ``index`` (1-based) of ``total``."""
    return (
        f"You will summarize segment {index} of {total} of a longer transcript.\n"
        "Return ONLY 5-8 concise bullet points capturing unique, substantive ideas "
        "(no repetition, no meta commentary).\n"
        "No intro text, just bullet points.\n\n"
        f"Segment {index}:\n{segment}"
    )


def narrator_script_prompt(
    summary: str, min_words: int, max_words: int, min_minutes: int, max_minutes: int
) -> str:
    """Returns the single-narrator script prompt for the given length bounds."""
    return (
        f"Task: Based on the SUMMARY below, write a {min_words}-{max_words} word "
        f"(approximately {min_minutes}-{max_minutes} minutes) single-narrator podcast "
        "segment where a Podslice host explains the highlights to listeners.\n\n"
        "Identity & framing:\n"
        "- The speaker is a Podslice host summarizing someone else's content.\n"
        "- Do NOT reenact or impersonate the original speakers.\n"
        "- Present key takeaways, context, and insights.\n\n"
        "Brand opener (must be the first line, exactly):\n"
        f'"{BRAND_OPENER}"\n\n'
        "Constraints:\n"
        "- No stage directions, no timestamps, no sound effects.\n"
        "- Spoken words only.\n"
        "- Natural, engaging tone.\n"
        '- Avoid claiming ownership of original content; refer to it as "the video" '
        'or "the episode."\n\n'
        "Structure:\n"
        "- Hook that frames this as a Podslice summary.\n"
        "- Smooth transitions between highlight clusters.\n"
        "- Clear, concise wrap-up.\n\n"
        f"SUMMARY:\n{summary}"
    )


def dialogue_script_prompt(
    summary: str, min_words: int, max_words: int, min_minutes: int, max_minutes: int
) -> str:
    """Returns the two-host script prompt; the model must answer with a JSON array."""
    return (
        f"Task: Based on the SUMMARY below, write a {min_words}-{max_words} word "
        f"(approximately {min_minutes}-{max_minutes} minutes) two-host podcast "
        "conversation where Podslice hosts A and B explain the highlights to listeners. "
        "Alternate speakers naturally.\n\n"
        "Identity & framing:\n"
        "- Hosts are from Podslice and are commenting on someone else's content.\n"
        "- They do NOT reenact or impersonate the original speakers.\n"
        "- They present key takeaways, context, and insights.\n\n"
        "Brand opener (must be the first line, exactly, spoken by A):\n"
        f'"{BRAND_OPENER}"\n\n'
        "Constraints:\n"
        "- No stage directions, no timestamps, no sound effects.\n"
        "- Spoken dialogue only.\n"
        "- Natural, engaging tone.\n"
        '- Avoid claiming ownership of original content; refer to it as "the video" '
        'or "the episode."\n'
        "- Do not include any speaker names, labels, or direct addresses in the text "
        "(e.g., no 'A', 'B', 'Hey Host'). The hosts discuss the content without "
        "referencing each other by name or label.\n\n"
        'Output ONLY a valid JSON array of objects with fields: speaker ("A" or "B") '
        "and text (string). The text MUST NOT include any speaker names or labels; "
        "only the spoken words. No markdown.\n\n"
        f"SUMMARY:\n{summary}"
    )


def speech_prompt(text: str) -> str:
    """Wraps a chunk of script for the TTS model so only spoken words are read."""
    return (
        "Read the following podcast script aloud in a clear, engaging style. "
        "Read only the spoken words:\n\n"
        f"{text}"
    )
