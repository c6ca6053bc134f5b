"""Language-model provider interface."""

import re
from abc import ABC, abstractmethod

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?")


class LanguageModelProvider(ABC):
    """A chat-style model that turns a system prompt and user message into text.

    Implementations raise UpstreamUnavailable for any transport, credential or
    response-shape failure so callers can fall back to the next provider.
    """

    #: Human-readable name reported in analysis responses
    name: str = "provider"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials and settings needed for a call are present."""

    @abstractmethod
    def complete(self, system_prompt: str, user_message: str) -> str:
        """Return the model's text reply.

        Args:
            system_prompt: Fixed instructions for the model
            user_message: Caller-supplied content

        Returns:
            Reply text (may be empty)

        Raises:
            UpstreamUnavailable: If the provider cannot produce a reply
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences that models wrap around JSON replies."""
    return _FENCE_PATTERN.sub("", text).strip()
