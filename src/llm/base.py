from abc import ABC, abstractmethod
from typing import Optional


class TextProvider(ABC):
    """
    Interface of a text generation provider.

    Implementations raise on any failure (missing credentials, API error,
    timeout, empty answer); callers treat every exception as a failure of
    this provider and move on to the next one.
    """

    name: str = "text-provider"

    @abstractmethod
    def generate(self, prompt: str, temperature: Optional[float] = None) -> str:
        """Return the model's answer to ``prompt``."""

    def __repr__(self):
        return f"<{type(self).__name__}(name={self.name})>"
