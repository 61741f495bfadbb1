"""Per-user preferences stored alongside the entry index."""

from typing import Self

from pydantic import BaseModel, Field

from video_diary.domain.models.entry import normalize_tags

DEFAULT_TRANSCRIPT_LANGUAGE = "en-US"


def _optional(value: str | None) -> str | None:
    trimmed = (value or "").strip()
    return trimmed or None


class UserPreferences(BaseModel):
    """Recording and enrichment preferences for one user segment."""

    camera_device_id: str | None = Field(default=None, description="Last used camera")
    microphone_device_id: str | None = Field(
        default=None,
        description="Last used microphone",
    )
    transcript_language: str = Field(
        default=DEFAULT_TRANSCRIPT_LANGUAGE,
        description="BCP-47 language used for transcription and summaries",
    )
    favorite_tags: list[str] = Field(
        default_factory=list,
        description="Tags the tag suggester may choose from",
    )

    def normalized(self) -> Self:
        """Return a copy with trimmed identifiers and normalized tags."""
        return self.model_copy(
            update={
                "camera_device_id": _optional(self.camera_device_id),
                "microphone_device_id": _optional(self.microphone_device_id),
                "transcript_language": _optional(self.transcript_language)
                or DEFAULT_TRANSCRIPT_LANGUAGE,
                "favorite_tags": normalize_tags(self.favorite_tags),
            }
        )

    @property
    def iso_language(self) -> str:
        """Two-letter language code, e.g. ``en`` for ``en-US``."""
        return self.transcript_language.split("-", 1)[0].lower()

    @property
    def is_english(self) -> bool:
        return self.iso_language == "en"
