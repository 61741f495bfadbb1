"""LLM service implementations."""

from video_diary.infrastructure.llm.anthropic_llm import AnthropicLLMService
from video_diary.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)
from video_diary.infrastructure.llm.openai_llm import OpenAILLMService

__all__ = [
    "LLMServiceBase",
    "LLMResponse",
    "LLMUsage",
    "Message",
    "MessageRole",
    "OpenAILLMService",
    "AnthropicLLMService",
]
