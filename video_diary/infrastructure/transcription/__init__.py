"""Transcription service implementations."""

from video_diary.infrastructure.transcription.base import (
    TranscriptionError,
    TranscriptionResult,
    TranscriptionServiceBase,
)
from video_diary.infrastructure.transcription.openai_whisper import (
    OpenAIWhisperTranscription,
)

__all__ = [
    "TranscriptionServiceBase",
    "TranscriptionResult",
    "TranscriptionError",
    "OpenAIWhisperTranscription",
]
