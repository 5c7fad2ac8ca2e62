# SPDX-License-Identifier: Apache-2.0
"""
Anthropic client implementation for face photo classification.
"""
import base64
import logging
import time
from typing import Optional

import anthropic
from pydantic import BaseModel

from .base import LLMResponse, LLMUsage, LLMError, LLMTimeoutError, LLMRateLimitError, validate_reply

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Anthropic client with JSON output support"""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-sonnet-20241022",
        timeout_seconds: int = 45
    ):
        self.client = anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout_seconds
        )
        self.model = model
        self.timeout_seconds = timeout_seconds

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self.model

    def _prepare_messages(
        self,
        user: str,
        image_data: Optional[bytes] = None,
        image_mime_type: Optional[str] = None
    ) -> list[dict]:
        """Prepare messages for Anthropic API"""
        if image_data:
            encoded_image = base64.b64encode(image_data).decode('utf-8')
            content = [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image_mime_type or "image/jpeg",
                        "data": encoded_image
                    }
                },
                {"type": "text", "text": user}
            ]
        else:
            content = user

        return [{"role": "user", "content": content}]

    def complete_json(
        self,
        *,
        system: str,
        user: str,
        schema: type[BaseModel],
        max_output_tokens: int,
        image_data: Optional[bytes] = None,
        image_mime_type: Optional[str] = None
    ) -> LLMResponse:
        """Complete with JSON output validated against schema"""
        start_time = time.time()
        messages = self._prepare_messages(user, image_data, image_mime_type)

        try:
            response = self.client.messages.create(
                model=self.model,
                system=system,
                messages=messages,
                max_tokens=max_output_tokens,
                temperature=0.1
            )
        except anthropic.RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit: {e}")
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic timeout: {e}")
        except anthropic.APIError as e:
            raise LLMError(f"Anthropic API error: {e}")

        duration = time.time() - start_time
        content = "".join(b.text for b in response.content if getattr(b, "type", "") == "text")
        logger.debug(f"Anthropic raw response: {content}")
        result_dict = validate_reply(content, schema, self.provider_name)

        usage = LLMUsage(
            provider=self.provider_name,
            model=self.model,
            input_tokens=response.usage.input_tokens if response.usage else None,
            output_tokens=response.usage.output_tokens if response.usage else None,
            duration_seconds=duration,
            meta={"stop_reason": response.stop_reason}
        )

        return LLMResponse(
            content=result_dict,
            usage=usage,
            raw_response=content
        )
