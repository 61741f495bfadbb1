"""OpenAI Whisper implementation of transcription service."""

from pathlib import Path
from typing import Any, cast

from openai import AsyncOpenAI

from video_diary.commons.telemetry import timed
from video_diary.infrastructure.transcription.base import (
    TranscriptionError,
    TranscriptionResult,
    TranscriptionServiceBase,
)

# Whisper API upload limit
_MAX_FILE_BYTES = 25 * 1024 * 1024


class OpenAIWhisperTranscription(TranscriptionServiceBase):
    """OpenAI Whisper API implementation of transcription service.

    Browser recordings (webm, mp4) are accepted by the API as-is, so no
    audio extraction step is needed.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        timeout_seconds: float = 300,
    ) -> None:
        """Initialize OpenAI Whisper client.

        Args:
            api_key: OpenAI API key.
            model: Whisper model to use.
            base_url: Optional custom API endpoint (for Azure, etc.).
            timeout_seconds: Per-request timeout.
        """
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._model = model

    @timed
    async def transcribe(
        self,
        media_path: str,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe a recording with the Whisper API."""
        path = Path(media_path)
        size = path.stat().st_size
        if size > _MAX_FILE_BYTES:
            msg = f"{path.name} is {size} bytes, limit is {_MAX_FILE_BYTES}"
            raise TranscriptionError(msg)

        kwargs: dict[str, Any] = {
            "model": self._model,
            "response_format": "verbose_json",
        }
        if language_hint:
            kwargs["language"] = language_hint

        with path.open("rb") as media_file:
            # Cast to Any to work around strict overload typing in OpenAI SDK
            create_fn = cast("Any", self._client.audio.transcriptions.create)
            response = await create_fn(file=media_file, **kwargs)

        return TranscriptionResult(
            text=(getattr(response, "text", "") or "").strip(),
            language=getattr(response, "language", None) or language_hint,
            duration_seconds=getattr(response, "duration", None),
        )

    @property
    def max_file_bytes(self) -> int | None:
        return _MAX_FILE_BYTES
