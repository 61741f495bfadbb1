"""OpenAI implementation of LLM service."""

from typing import Any

from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionMessageParam

from video_diary.commons.telemetry import end_llm_generation, start_llm_generation, timed
from video_diary.infrastructure.llm.base import (
    LLMResponse,
    LLMServiceBase,
    LLMUsage,
    Message,
)


class OpenAILLMService(LLMServiceBase):
    """Chat completions against OpenAI or an OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        timeout_seconds: float = 60,
    ) -> None:
        """Initialize OpenAI LLM client.

        Args:
            api_key: OpenAI API key.
            model: Default model to use.
            base_url: Optional custom API endpoint.
            timeout_seconds: Per-request timeout.
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
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
        json_mode: bool = False,
        trace_name: str | None = None,
        trace_metadata: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate a completion."""
        use_model = model or self._model
        openai_messages: list[ChatCompletionMessageParam] = [
            {"role": m.role.value, "content": m.content}  # type: ignore[misc]
            for m in messages
        ]

        kwargs: dict[str, Any] = {
            "model": use_model,
            "messages": openai_messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        generation = start_llm_generation(
            name=trace_name or "openai_chat_completion",
            model=use_model,
            input_messages=[{"role": m.role.value, "content": m.content} for m in messages],
            model_parameters={
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            },
            metadata={"provider": "openai", **(trace_metadata or {})},
        )

        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as e:
            end_llm_generation(generation, None, level="ERROR", status_message=str(e))
            raise

        choice = response.choices[0]
        usage = response.usage
        result = LLMResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason or "stop",
            usage=LLMUsage(
                prompt_tokens=usage.prompt_tokens if usage else 0,
                completion_tokens=usage.completion_tokens if usage else 0,
                total_tokens=usage.total_tokens if usage else 0,
            ),
            model=response.model,
        )
        end_llm_generation(generation, result.content, usage=result.usage.as_langfuse_usage())
        return result

    @property
    def supports_json_mode(self) -> bool:
        return True

    @property
    def default_model(self) -> str:
        return self._model
