"""
OpenAI-compatible chat-completions gateway provider.

Any gateway exposing POST {base_url}/chat/completions with a bearer API key
works here. The key is read from the environment at call time so it can be
rotated without rebuilding the provider.
"""

import os
from typing import Any, Optional

import requests

from ..app_logging import get_logger, sanitize_secret
from ..config import ChatCompletionsConfig
from ..errors import UpstreamUnavailable
from .base import LanguageModelProvider

logger = get_logger('providers.chat_completions')


class ChatCompletionsProvider(LanguageModelProvider):
    """Calls a chat-completions gateway over HTTPS."""

    name = "LLM gateway (chat completions)"

    def __init__(
        self,
        settings: Optional[ChatCompletionsConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or ChatCompletionsConfig()
        self._session = session or requests.Session()

    @property
    def api_key(self) -> Optional[str]:
        return os.environ.get(self.settings.api_key_env) or None

    @property
    def endpoint(self) -> str:
        return self.settings.base_url.rstrip("/") + "/chat/completions"

    def is_configured(self) -> bool:
        return self.settings.enabled and self.api_key is not None

    def _payload(self, system_prompt: str, user_message: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.settings.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        }
        if self.settings.temperature is not None:
            payload["temperature"] = self.settings.temperature
        return payload

    def complete(self, system_prompt: str, user_message: str) -> str:
        api_key = self.api_key
        if api_key is None:
            raise UpstreamUnavailable(
                f"{self.settings.api_key_env} is not set", provider=self.name
            )

        logger.debug(f"POST {self.endpoint} (key {sanitize_secret(api_key)})")
        try:
            response = self._session.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                json=self._payload(system_prompt, user_message),
                timeout=(self.settings.connect_timeout, self.settings.read_timeout),
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.warning(f"Chat completions request failed: {e}")
            raise UpstreamUnavailable(f"AI gateway request failed: {e}", provider=self.name) from e
        except ValueError as e:
            raise UpstreamUnavailable(f"AI gateway returned invalid JSON: {e}", provider=self.name) from e

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""
