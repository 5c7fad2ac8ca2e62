# SPDX-License-Identifier: Apache-2.0
"""
LLM client protocol and common types for the face classifier.
"""
from __future__ import annotations
from typing import Protocol, Optional, Dict, Any
from pydantic import BaseModel, ValidationError
from dataclasses import dataclass

from facescan.verdict import VerdictParseError, extract_json_block


@dataclass
class LLMUsage:
    """Token usage information"""
    provider: str
    model: str
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None
    duration_seconds: Optional[float] = None
    meta: Optional[Dict[str, Any]] = None


@dataclass
class LLMResponse:
    """Validated response from an LLM with usage metadata"""
    content: Dict[str, Any]
    usage: LLMUsage
    raw_response: Optional[str] = None


class LLMClient(Protocol):
    """Protocol for vision LLM clients returning schema-validated JSON"""

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
        """
        Complete with JSON output validated against schema.

        Args:
            system: System prompt
            user: User prompt
            schema: Pydantic model class for validation
            max_output_tokens: Maximum tokens to generate
            image_data: Optional image bytes for vision models
            image_mime_type: MIME type of image (e.g., 'image/jpeg')

        Returns:
            LLMResponse with the validated dict
        """
        ...

    @property
    def provider_name(self) -> str:
        """Name of the provider (e.g., 'openai', 'anthropic')"""
        ...

    @property
    def model_name(self) -> str:
        """Name of the model being used"""
        ...


class LLMError(Exception):
    """Base exception for LLM-related errors"""
    pass


class LLMValidationError(LLMError):
    """Reply held no valid JSON or failed schema validation"""
    def __init__(self, message: str, raw_content: str = ""):
        super().__init__(message)
        self.raw_content = raw_content


class LLMTimeoutError(LLMError):
    """Request timed out"""
    pass


class LLMRateLimitError(LLMError):
    """Rate limit exceeded"""
    pass


def validate_reply(content: str, schema: type[BaseModel], provider: str) -> Dict[str, Any]:
    """Extract the JSON block of a free-text reply and validate it."""
    if not content:
        raise LLMValidationError(f"Empty response from {provider}")
    try:
        parsed = extract_json_block(content)
        return schema.model_validate(parsed).model_dump()
    except VerdictParseError as e:
        raise LLMValidationError(f"Invalid JSON from {provider}: {e}", content[:500])
    except ValidationError as e:
        raise LLMValidationError(f"Schema validation failed: {e}", content[:500])
