"""Langfuse integration for LLM observability.

Every summary, title and tag completion is recorded as a Langfuse
generation when tracing is configured. Tracing failures are logged and
never reach the enrichment pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from langfuse import Langfuse

if TYPE_CHECKING:
    from langfuse import LangfuseGeneration

    from video_diary.commons.settings.models import LangfuseSettings

logger = logging.getLogger(__name__)


@dataclass
class _LangfuseState:
    """Internal state holder for the Langfuse client."""

    client: Langfuse | None = None
    enabled: bool = False


# Singleton state instance
_state = _LangfuseState()


def init_langfuse(settings: LangfuseSettings) -> None:
    """Initialize the global Langfuse client.

    Args:
        settings: Langfuse configuration settings.
    """
    if not settings.enabled:
        logger.info("Langfuse is disabled")
        _state.enabled = False
        return

    if not settings.public_key or not settings.secret_key:
        logger.warning("Langfuse keys not configured, tracing disabled")
        _state.enabled = False
        return

    try:
        _state.client = Langfuse(
            public_key=settings.public_key,
            secret_key=settings.secret_key,
            host=settings.host,
            debug=settings.debug,
            sample_rate=settings.sample_rate,
            flush_at=settings.flush_at,
            flush_interval=settings.flush_interval,
        )
        _state.enabled = True
        logger.info("Langfuse initialized", extra={"host": settings.host})
    except Exception as e:
        logger.error("Failed to initialize Langfuse", extra={"error": str(e)})
        _state.enabled = False


def shutdown_langfuse() -> None:
    """Flush pending events and drop the client."""
    if _state.client is None:
        return
    try:
        _state.client.flush()
        _state.client.shutdown()
        logger.info("Langfuse shut down")
    except Exception as e:
        logger.error("Error shutting down Langfuse", extra={"error": str(e)})
    finally:
        _state.client = None
        _state.enabled = False


def is_langfuse_enabled() -> bool:
    """Check if Langfuse tracing is enabled and initialized."""
    return _state.enabled and _state.client is not None


def start_llm_generation(
    name: str,
    model: str,
    input_messages: list[dict[str, Any]],
    model_parameters: dict[str, Any] | None = None,
    metadata: dict[str, Any] | None = None,
) -> LangfuseGeneration | None:
    """Open a generation for one completion call.

    Args:
        name: Name of the generation (e.g., "summary").
        model: Model identifier.
        input_messages: Messages sent to the model.
        model_parameters: Temperature, max_tokens, etc.
        metadata: Additional metadata such as the entry id.

    Returns:
        The generation handle, or None if tracing is disabled.
    """
    if not is_langfuse_enabled():
        return None

    try:
        return _state.client.start_generation(  # type: ignore[union-attr]
            name=name,
            model=model,
            input=input_messages,
            model_parameters=model_parameters or {},
            metadata=metadata or {},
        )
    except Exception as e:
        logger.error("Error creating LLM generation", extra={"error": str(e)})
        return None


def end_llm_generation(
    generation: LangfuseGeneration | None,
    output: str | dict[str, Any] | None,
    usage: dict[str, int] | None = None,
    level: str = "DEFAULT",
    status_message: str | None = None,
) -> None:
    """Record the outcome of a generation and close it.

    Args:
        generation: Handle returned by start_llm_generation.
        output: Completion text, or None when the call failed.
        usage: Token usage with input/output/total counts.
        level: DEFAULT, WARNING or ERROR.
        status_message: Optional status message, e.g. the provider error.
    """
    if generation is None:
        return

    try:
        generation.update(
            output=output,
            usage_details=usage,
            level=level,
            status_message=status_message,
        )
        generation.end()
    except Exception as e:
        logger.error("Error ending LLM generation", extra={"error": str(e)})
