"""
Error taxonomy of the episode pipeline.

Every error carries ``user_message``, the non-technical explanation written to
the job record when the job fails. Provider internals stay in the exception
chain and the logs.
"""

from typing import Optional, Sequence


GENERIC_FAILURE_MESSAGE = (
    "Something went wrong while generating your episode. Please try again later."
)


class PipelineError(Exception):
    """Base class for every error raised by a pipeline stage."""

    fatal = True
    user_message = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message


class TranscriptMissingError(PipelineError):
    user_message = "We couldn't find a transcript for this episode, so it could not be generated."


class ProviderFailureError(PipelineError):
    """Both the primary and the secondary provider failed for one call."""

    user_message = (
        "Our AI services are temporarily unavailable and your episode could not be "
        "generated. Please try again later."
    )

    def __init__(
        self,
        message: str,
        provider_errors: Sequence[tuple[str, BaseException]] = (),
        user_message: Optional[str] = None,
    ):
        super().__init__(message, user_message)
        self.provider_errors = list(provider_errors)


class ScriptParseError(PipelineError):
    user_message = "We couldn't prepare the conversation script for your episode."


class SynthesisFailureError(ProviderFailureError):
    """One chunk or dialogue line could not be synthesized by any provider."""

    user_message = (
        "We couldn't convert your script to audio. Please try again later."
    )

    def __init__(
        self,
        message: str,
        chunk_index: int,
        provider_errors: Sequence[tuple[str, BaseException]] = (),
    ):
        super().__init__(message, provider_errors)
        self.chunk_index = chunk_index


class AssemblyError(PipelineError):
    user_message = "We couldn't assemble the audio for your episode."


class CleanupError(PipelineError):
    """Temporary chunk deletion failed. Logged, never fatal."""

    fatal = False
