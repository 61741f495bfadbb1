"""Abstract base class for LLM services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MessageRole(str, Enum):
    """Role of a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    """A message in the conversation."""

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=MessageRole.USER, content=content)


@dataclass
class LLMUsage:
    """Token usage statistics."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def as_langfuse_usage(self) -> dict[str, int]:
        return {
            "input": self.prompt_tokens,
            "output": self.completion_tokens,
            "total": self.total_tokens,
        }


@dataclass
class LLMResponse:
    """Response from LLM generation."""

    content: str
    finish_reason: str
    usage: LLMUsage
    model: str


class LLMServiceBase(ABC):
    """Abstract base class for text completion providers.

    Implementations:
    - OpenAI (and OpenAI-compatible endpoints via ``base_url``)
    - Anthropic
    """

    @abstractmethod
    async def generate(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_mode: bool = False,
        trace_name: str | None = None,
        trace_metadata: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate a completion.

        Args:
            messages: List of conversation messages.
            model: Optional model override.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            json_mode: Whether to force a JSON object response.
            trace_name: Name of the Langfuse generation, e.g. "summary".
            trace_metadata: Extra metadata recorded on the generation.

        Returns:
            LLM response with content and usage.
        """

    @property
    @abstractmethod
    def supports_json_mode(self) -> bool:
        """Whether the provider can be forced to emit a JSON object."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Default model identifier."""
