"""
Ordered provider fallback.

A capability (text generation, speech synthesis) is served by an ordered
list of providers: the primary first, then the backup. Each provider is tried
at most once per call; when all of them fail a typed error is raised with the
last provider error as its cause.
"""

import logging
from typing import Callable, Optional, Sequence, TypeVar

from .errors import ProviderFailureError


logger = logging.getLogger("pipeline")

P = TypeVar("P")
R = TypeVar("R")


def run_with_fallback(
    providers: Sequence[P],
    call: Callable[[P], R],
    operation: str,
    on_fallback: Optional[Callable[[P], None]] = None,
    error_factory: Optional[Callable[[str, list], Exception]] = None,
) -> R:
    """
    Call ``call(provider)`` for each provider in order until one succeeds.

    Args:
        providers: Providers in priority order
        call: Work to run against one provider
        operation: Label used in logs and in the terminal error
        on_fallback: Called with the next provider before each fallback attempt
        error_factory: Builds the terminal error from (message, provider_errors);
            defaults to ProviderFailureError

    Returns:
        The first successful result

    Raises:
        ProviderFailureError (or the factory's error) when every provider failed
    """
    errors: list[tuple[str, BaseException]] = []
    for position, provider in enumerate(providers):
        name = getattr(provider, "name", type(provider).__name__)
        if position > 0:
            logger.warning(f"{operation}: falling back to provider {name}")
            if on_fallback is not None:
                on_fallback(provider)
        try:
            return call(provider)
        except Exception as e:
            # Any provider exception (API error, timeout, missing key) is a provider failure
            logger.error(
                f"{operation} failed with provider {name}: {type(e).__name__}: {e}",
                exc_info=True,
            )
            errors.append((name, e))

    tried = ", ".join(name for name, _ in errors) or "none configured"
    message = f"{operation} failed with every provider ({tried})"
    factory = error_factory or ProviderFailureError
    error = factory(message, errors)
    if errors:
        raise error from errors[-1][1]
    raise error
