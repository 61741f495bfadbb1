"""Anthropic Claude implementation of LLM service."""

from typing import Any

from anthropic import AsyncAnthropic

from video_diary.commons.telemetry import end_llm_generation, start_llm_generation, timed
from video_diary.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
    MessageRole,
)


class AnthropicLLMService(LLMServiceBase):
    """Anthropic Messages API implementation.

    Claude has no JSON response mode; callers asking for JSON rely on the
    prompt, and the generators parse leniently.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-5-haiku-latest",
        base_url: str | None = None,
        max_retries: int = 2,
        timeout_seconds: float = 60,
    ) -> None:
        """Initialize Anthropic LLM client.

        Args:
            api_key: Anthropic API key.
            model: Default model to use.
            base_url: Optional custom API endpoint.
            max_retries: Maximum number of retries for failed requests.
            timeout_seconds: Per-request timeout.
        """
        self._client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            max_retries=max_retries,
            timeout=timeout_seconds,
        )
        self._model = model

    @timed
    async def generate(
        self,
        messages: list[Message],
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int = 1024,
        json_mode: bool = False,  # noqa: ARG002 - Claude handles JSON via prompting
        trace_name: str | None = None,
        trace_metadata: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate a completion."""
        use_model = model or self._model
        anthropic_messages, system_prompt = self._convert_messages(messages)

        kwargs: dict[str, Any] = {
            "model": use_model,
            "messages": anthropic_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system_prompt:
            kwargs["system"] = system_prompt

        generation = start_llm_generation(
            name=trace_name or "anthropic_messages",
            model=use_model,
            input_messages=[{"role": m.role.value, "content": m.content} for m in messages],
            model_parameters={"temperature": temperature, "max_tokens": max_tokens},
            metadata={"provider": "anthropic", **(trace_metadata or {})},
        )

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            end_llm_generation(generation, None, level="ERROR", status_message=str(e))
            raise

        content = next(
            (block.text for block in response.content if block.type == "text"),
            "",
        )
        result = LLMResponse(
            content=content,
            finish_reason=response.stop_reason or "end_turn",
            usage=LLMUsage(
                prompt_tokens=response.usage.input_tokens,
                completion_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            ),
            model=response.model,
        )
        end_llm_generation(generation, result.content, usage=result.usage.as_langfuse_usage())
        return result

    @staticmethod
    def _convert_messages(
        messages: list[Message],
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Split out the system prompt; Anthropic takes it separately."""
        system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
        converted = [
            {"role": m.role.value, "content": m.content}
            for m in messages
            if m.role != MessageRole.SYSTEM
        ]
        return converted, "\n\n".join(system_parts) or None

    @property
    def supports_json_mode(self) -> bool:
        return False

    @property
    def default_model(self) -> str:
        return self._model
