"""Shared plumbing for LLM-backed enrichment generators."""

from typing import Any

from video_diary.commons.telemetry import get_logger
from video_diary.infrastructure.llm.base import LLMServiceBase, Message


class ChatGenerator:
    """Base for generators that produce text with a chat completion.

    Subclasses call :meth:`_complete`, which returns ``None`` instead of
    raising when the provider is missing or fails.
    """

    trace_name = "chat"

    def __init__(
        self,
        llm_service: LLMServiceBase | None,
        *,
        enabled: bool,
        max_tokens: int,
        temperature: float = 0.2,
    ) -> None:
        self._llm = llm_service
        self._enabled = enabled
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._logger = get_logger(self.__class__.__module__)

    @property
    def is_available(self) -> bool:
        """Whether the feature is enabled and a provider is configured."""
        return self._enabled and self._llm is not None

    async def _complete(
        self,
        messages: list[Message],
        *,
        json_mode: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> str | None:
        if self._llm is None:
            return None
        try:
            response = await self._llm.generate(
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                json_mode=json_mode and self._llm.supports_json_mode,
                trace_name=self.trace_name,
                trace_metadata=metadata,
            )
        except Exception as e:
            self._logger.error(
                f"{self.trace_name} generation failed",
                extra={"error": str(e), **(metadata or {})},
            )
            return None

        content = response.content.strip()
        return content or None
