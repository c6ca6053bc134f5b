"""
Amazon Bedrock provider for Anthropic Claude models.

Uses the standard boto3 credential chain (environment, shared config,
instance profile). The runtime client is built lazily on first use with
explicit timeouts and bounded retries.
"""

import json
import threading
from typing import Any, Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..app_logging import get_logger
from ..config import BedrockConfig
from ..errors import UpstreamUnavailable
from .base import LanguageModelProvider

logger = get_logger('providers.bedrock')

ANTHROPIC_VERSION = "bedrock-2023-05-31"


class BedrockProvider(LanguageModelProvider):
    """Invokes an Anthropic model through the bedrock-runtime InvokeModel API."""

    name = "Amazon Bedrock (Claude 3 Sonnet)"

    def __init__(
        self,
        settings: Optional[BedrockConfig] = None,
        session: Optional[boto3.session.Session] = None,
        client: Optional[BaseClient] = None,
    ):
        """
        Initialize the provider.

        Args:
            settings: Model and sampling settings (defaults if omitted)
            session: boto3 session used for credential lookup and client creation
            client: Pre-built bedrock-runtime client, mainly for tests
        """
        self.settings = settings or BedrockConfig()
        self.region = self.settings.resolved_region()
        self._session = session or boto3.session.Session()
        self._client = client
        self._lock = threading.Lock()

        logger.debug(f"BedrockProvider initialized: model={self.settings.model_id}, region={self.region}")

    def _mk_runtime_client(self) -> BaseClient:
        """Build a bedrock-runtime client with timeouts and bounded retries."""
        cfg = Config(
            retries={"max_attempts": 3, "mode": "standard"},
            connect_timeout=self.settings.connect_timeout,
            read_timeout=self.settings.read_timeout,
            tcp_keepalive=True,
        )
        return self._session.client("bedrock-runtime", region_name=self.region, config=cfg)

    @property
    def client(self) -> BaseClient:
        with self._lock:
            if self._client is None:
                self._client = self._mk_runtime_client()
            return self._client

    def is_configured(self) -> bool:
        if not self.settings.enabled:
            return False
        if self._client is not None:
            return True
        return self._session.get_credentials() is not None

    def _payload(self, system_prompt: str, user_message: str) -> dict[str, Any]:
        return {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            "top_p": self.settings.top_p,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_message}],
        }

    def complete(self, system_prompt: str, user_message: str) -> str:
        body = json.dumps(self._payload(system_prompt, user_message))
        try:
            response = self.client.invoke_model(
                modelId=self.settings.model_id,
                body=body,
                contentType="application/json",
                accept="application/json",
            )
            data = json.loads(response["body"].read())
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Bedrock invocation failed: {e}")
            raise UpstreamUnavailable(f"Bedrock API error: {e}", provider=self.name) from e
        except (KeyError, ValueError) as e:
            raise UpstreamUnavailable(f"Unexpected Bedrock response: {e}", provider=self.name) from e

        content = data.get("content") or []
        if not content or not isinstance(content[0], dict):
            return ""
        return content[0].get("text") or ""
