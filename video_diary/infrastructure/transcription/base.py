"""Abstract base class for transcription services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class TranscriptionResult:
    """Complete transcription result."""

    text: str
    language: str | None = None
    duration_seconds: float | None = None


class TranscriptionError(Exception):
    """Raised when a provider rejects a recording before transcribing it."""


class TranscriptionServiceBase(ABC):
    """Abstract base class for speech-to-text providers.

    Implementations:
    - OpenAI Whisper API (and compatible endpoints)
    """

    @abstractmethod
    async def transcribe(
        self,
        media_path: str,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe the audio track of a recording.

        Args:
            media_path: Path to the media file.
            language_hint: Optional ISO 639-1 code (e.g., 'en', 'es').

        Returns:
            The transcription.

        Raises:
            TranscriptionError: If the file cannot be sent to the provider.
        """

    @property
    @abstractmethod
    def max_file_bytes(self) -> int | None:
        """Largest accepted upload, or None when unlimited."""
