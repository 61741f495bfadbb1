"""Telemetry module - logging and LLM tracing."""

from video_diary.commons.telemetry.decorators import LogContext, timed
from video_diary.commons.telemetry.langfuse_client import (
    end_llm_generation,
    init_langfuse,
    is_langfuse_enabled,
    shutdown_langfuse,
    start_llm_generation,
)
from video_diary.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    get_logger,
    set_correlation_id,
    set_log_context,
)

__all__ = [
    # Decorators
    "timed",
    "LogContext",
    # Logger
    "get_logger",
    "configure_logging",
    "JsonFormatter",
    "TextFormatter",
    # Correlation ID
    "get_correlation_id",
    "set_correlation_id",
    # Log Context
    "get_log_context",
    "set_log_context",
    "clear_log_context",
    # Langfuse
    "init_langfuse",
    "shutdown_langfuse",
    "is_langfuse_enabled",
    "start_llm_generation",
    "end_llm_generation",
]
