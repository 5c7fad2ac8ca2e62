# SPDX-License-Identifier: Apache-2.0
"""
OpenAI client implementation for face photo classification.
"""
import base64
import logging
import time
from typing import Optional

import openai
from pydantic import BaseModel

from .base import LLMResponse, LLMUsage, LLMError, LLMTimeoutError, LLMRateLimitError, validate_reply

logger = logging.getLogger(__name__)


class OpenAIClient:
    """OpenAI client with JSON output support"""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout_seconds: int = 45,
        project: Optional[str] = None,
        organization: Optional[str] = None
    ):
        self.client = openai.OpenAI(
            api_key=api_key,
            project=project,
            organization=organization,
            timeout=timeout_seconds
        )
        self.model = model
        self.timeout_seconds = timeout_seconds

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self.model

    def _prepare_messages(
        self,
        system: str,
        user: str,
        image_data: Optional[bytes] = None,
        image_mime_type: Optional[str] = None
    ) -> list[dict]:
        """Prepare messages for OpenAI API"""
        messages = [{"role": "system", "content": system}]

        if image_data:
            encoded_image = base64.b64encode(image_data).decode('utf-8')
            user_content = [
                {"type": "text", "text": user},
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{image_mime_type or 'image/jpeg'};base64,{encoded_image}",
                        "detail": "high"
                    }
                }
            ]
            messages.append({"role": "user", "content": user_content})
        else:
            messages.append({"role": "user", "content": user})

        return messages

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
        messages = self._prepare_messages(system, user, image_data, image_mime_type)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_completion_tokens=max_output_tokens,
                temperature=0.1,
                response_format={"type": "json_object"}
            )
        except openai.RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit: {e}")
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI timeout: {e}")
        except openai.APIError as e:
            raise LLMError(f"OpenAI API error: {e}")

        duration = time.time() - start_time
        content = response.choices[0].message.content or ""
        logger.debug(f"OpenAI raw response: {content}")
        result_dict = validate_reply(content, schema, self.provider_name)

        usage_info = response.usage
        usage = LLMUsage(
            provider=self.provider_name,
            model=self.model,
            input_tokens=usage_info.prompt_tokens if usage_info else None,
            output_tokens=usage_info.completion_tokens if usage_info else None,
            duration_seconds=duration,
            meta={"finish_reason": response.choices[0].finish_reason}
        )

        return LLMResponse(
            content=result_dict,
            usage=usage,
            raw_response=content
        )
