# SPDX-License-Identifier: Apache-2.0
"""
LLM client abstractions for the face classifier.
"""
from .base import LLMClient, LLMResponse, LLMUsage, LLMError, LLMValidationError, LLMTimeoutError, LLMRateLimitError
from .openai_client import OpenAIClient
from .anthropic_client import AnthropicClient
from .router import LLMRouter

__all__ = [
    'LLMClient',
    'LLMResponse',
    'LLMUsage',
    'LLMError',
    'LLMValidationError',
    'LLMTimeoutError',
    'LLMRateLimitError',
    'OpenAIClient',
    'AnthropicClient',
    'LLMRouter'
]
