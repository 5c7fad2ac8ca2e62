# SPDX-License-Identifier: Apache-2.0
"""
LLM router with provider fallback and bounded retries.
"""
import logging
from typing import Dict, Any, Optional

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from pydantic import BaseModel

from .base import LLMClient, LLMResponse, LLMError, LLMTimeoutError, LLMRateLimitError
from .openai_client import OpenAIClient
from .anthropic_client import AnthropicClient

logger = logging.getLogger(__name__)


class LLMRouter:
    """Router with primary/secondary provider fallback"""

    def __init__(
        self,
        primary_client: LLMClient,
        secondary_client: Optional[LLMClient] = None,
        max_retries: int = 1
    ):
        self.primary_client = primary_client
        self.secondary_client = secondary_client
        self.max_retries = max(1, max_retries)

    @classmethod
    def from_config(
        cls,
        provider: str,
        openai_config: Optional[Dict[str, Any]] = None,
        anthropic_config: Optional[Dict[str, Any]] = None,
        max_retries: int = 1
    ) -> "LLMRouter":
        """Create router from configuration"""

        clients = {}

        if openai_config and openai_config.get("api_key"):
            clients["openai"] = OpenAIClient(**openai_config)

        if anthropic_config and anthropic_config.get("api_key"):
            clients["anthropic"] = AnthropicClient(**anthropic_config)

        if not clients:
            raise ValueError("At least one provider must be configured")

        if provider in clients:
            primary = clients[provider]
            secondary = next((c for name, c in clients.items() if name != provider), None)
        else:
            primary = next(iter(clients.values()))
            secondary = None
            logger.warning(f"Requested provider '{provider}' not available, using {primary.provider_name}")

        return cls(primary, secondary, max_retries)

    def complete_with_fallback(
        self,
        *,
        system: str,
        user: str,
        schema: type[BaseModel],
        max_output_tokens: int,
        image_data: Optional[bytes] = None,
        image_mime_type: Optional[str] = None
    ) -> LLMResponse:
        """Complete with automatic fallback to secondary provider"""
        kwargs = dict(
            system=system,
            user=user,
            schema=schema,
            max_output_tokens=max_output_tokens,
            image_data=image_data,
            image_mime_type=image_mime_type
        )
        try:
            return self._complete_with_retries(self.primary_client, **kwargs)
        except LLMError as e:
            logger.warning(f"Primary provider ({self.primary_client.provider_name}) failed: {e}")

            if not self.secondary_client:
                raise

            logger.info(f"Falling back to secondary provider: {self.secondary_client.provider_name}")
            try:
                return self._complete_with_retries(self.secondary_client, max_attempts=1, **kwargs)
            except LLMError as fallback_error:
                logger.error(f"Secondary provider also failed: {fallback_error}")
                raise LLMError(f"Both providers failed. Primary: {e}, Secondary: {fallback_error}")

    def _complete_with_retries(
        self,
        client: LLMClient,
        max_attempts: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Complete with retries on rate limits and timeouts for a specific client"""
        attempts = max_attempts or self.max_retries

        @retry(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type((LLMRateLimitError, LLMTimeoutError)),
            reraise=True
        )
        def _do_complete():
            return client.complete_json(**kwargs)

        return _do_complete()

    @property
    def active_provider(self) -> str:
        """Get the name of the active primary provider"""
        return self.primary_client.provider_name
