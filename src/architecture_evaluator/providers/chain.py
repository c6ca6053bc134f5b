"""Ordered provider selection with fallback."""

from dataclasses import dataclass
from typing import Optional, Sequence

from ..app_logging import get_logger
from ..errors import UpstreamUnavailable
from .base import LanguageModelProvider

logger = get_logger('providers.chain')


@dataclass(frozen=True)
class Completion:
    """A reply and the name of the provider that produced it."""
    text: str
    provider: str


class ProviderChain:
    """Tries providers in order until one answers.

    Unconfigured providers are skipped without a call. A provider that raises
    UpstreamUnavailable hands over to the next one. If none answers, the last
    failure is re-raised (or a "no provider configured" error if every
    provider was skipped).
    """

    def __init__(self, providers: Sequence[LanguageModelProvider]):
        self.providers = list(providers)

    def configured(self) -> list[LanguageModelProvider]:
        return [p for p in self.providers if p.is_configured()]

    def complete(self, system_prompt: str, user_message: str) -> Completion:
        """Get a completion from the first provider able to answer.

        Args:
            system_prompt: Fixed instructions for the model
            user_message: Caller-supplied content

        Returns:
            Completion with reply text and provider name

        Raises:
            UpstreamUnavailable: If no provider is configured or all failed
        """
        last_error: Optional[UpstreamUnavailable] = None

        for provider in self.providers:
            if not provider.is_configured():
                logger.debug(f"Skipping unconfigured provider: {provider.name}")
                continue

            logger.info(f"Requesting completion from {provider.name}")
            try:
                text = provider.complete(system_prompt, user_message)
            except UpstreamUnavailable as e:
                logger.warning(f"{provider.name} unavailable, trying next provider: {e.message}")
                last_error = e
                continue
            return Completion(text=text, provider=provider.name)

        if last_error is not None:
            raise last_error
        raise UpstreamUnavailable("No AI provider configured")
