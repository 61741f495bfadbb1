"""Transcript generation with sidecar caching."""

import asyncio
from pathlib import Path

from video_diary.commons.locks import KeyedLock
from video_diary.commons.settings.models import TranscriptionSettings
from video_diary.commons.telemetry import get_logger
from video_diary.domain.models import UserPreferences, VideoEntry
from video_diary.infrastructure.storage import sidecars
from video_diary.infrastructure.storage.base import EntryStoreBase
from video_diary.infrastructure.transcription.base import TranscriptionServiceBase

# Shared by every generator instance so one media file is transcribed once
_TRANSCRIPT_LOCKS = KeyedLock()


class TranscriptGenerator:
    """Produces a transcript for an entry's media file.

    An existing ``.txt`` sidecar always wins over a new transcription. New
    transcripts are written to the sidecar before being returned.
    """

    def __init__(
        self,
        transcription_service: TranscriptionServiceBase | None,
        store: EntryStoreBase,
        settings: TranscriptionSettings,
    ) -> None:
        self._transcription = transcription_service
        self._store = store
        self._settings = settings
        self._logger = get_logger(__name__)

    @property
    def is_available(self) -> bool:
        return self._settings.enabled and self._transcription is not None

    async def generate(self, entry: VideoEntry, *, segment: str | None = None) -> str | None:
        """Return the entry's transcript, transcribing the media if needed.

        Args:
            entry: Entry whose media file is transcribed.
            segment: Segment owning the entry, for the language preference.

        Returns:
            Transcript text, or None when unavailable.
        """
        media_path = Path(entry.video_path)

        async with _TRANSCRIPT_LOCKS(str(media_path)):
            existing = sidecars.read_transcript(media_path)
            if existing and existing.strip():
                return existing.strip()
            if not self.is_available or self._transcription is None:
                return None
            if not media_path.exists():
                self._logger.warning(
                    "Media file missing, skipping transcription",
                    extra={"entry_id": entry.id, "video_path": str(media_path)},
                )
                return None

            language = await self._language(segment)
            try:
                result = await self._transcription.transcribe(
                    str(media_path),
                    language_hint=language,
                )
            except Exception as e:
                self._logger.error(
                    "Transcription failed",
                    extra={"entry_id": entry.id, "error": str(e)},
                )
                return None

            text = result.text.strip()
            if not text:
                return None

            loop = asyncio.get_running_loop()
            try:
                await loop.run_in_executor(
                    None, sidecars.write_transcript, media_path, text
                )
            except OSError as e:
                self._logger.error(
                    "Failed to write transcript sidecar",
                    extra={"entry_id": entry.id, "error": str(e)},
                )

            self._logger.info(
                "Generated transcript",
                extra={
                    "entry_id": entry.id,
                    "language": result.language,
                    "characters": len(text),
                },
            )
            return text

    async def _language(self, segment: str | None) -> str:
        """ISO 639-1 code of the segment's transcript language."""
        try:
            preferences = await self._store.get_preferences(segment=segment)
        except Exception as e:
            self._logger.warning(
                "Could not read preferences, using default language",
                extra={"error": str(e)},
            )
            preferences = UserPreferences(
                transcript_language=self._settings.default_language
            )
        return preferences.iso_language
