"""On-disk schema of a segment's ``entries.json``.

Three shapes have been written over time and are decoded in order:

1. current: ``{"schemaVersion": 2, "entries": [...], "preferences": {...}}``
2. legacy document: ``{"entries": [...], "preferences": {...}}`` whose
   entries may carry inline ``summary``, ``transcript`` and
   ``descriptionEmbedding`` values and use ``startedAt`` for the
   creation time
3. bare array of entries

Anything decoded by a non-current decoder, or carrying inline legacy
payloads, is flagged for migration so the store rewrites it.
"""

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from video_diary.domain.models import (
    ProcessingStatus,
    UserPreferences,
    VideoEntry,
    normalize_description,
    normalize_tags,
    normalize_title,
)

CURRENT_SCHEMA_VERSION = 2

_STATUS_ORDER = list(ProcessingStatus)
_STATUS_BY_KEY = {s.value.replace("_", ""): s for s in ProcessingStatus}


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class StoredPreferences(_CamelModel):
    """Serialized form of UserPreferences."""

    camera_device_id: str | None = None
    microphone_device_id: str | None = None
    transcript_language: str | None = None
    favorite_tags: list[str] | None = None

    def to_domain(self) -> UserPreferences:
        return UserPreferences.model_construct(
            camera_device_id=self.camera_device_id,
            microphone_device_id=self.microphone_device_id,
            transcript_language=self.transcript_language or "",
            favorite_tags=self.favorite_tags or [],
        ).normalized()

    @classmethod
    def from_domain(cls, preferences: UserPreferences) -> "StoredPreferences":
        return cls(**preferences.model_dump())


class StoredVideoEntry(_CamelModel):
    """Serialized form of VideoEntry.

    ``video_path`` is relative to the segment root when the media lives
    under it. The ``summary``, ``transcript`` and ``description_embedding``
    fields are read from old files only and never written back.
    """

    id: str
    title: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    video_path: str
    created_at: datetime = Field(
        alias="createdAt",
        validation_alias=AliasChoices("createdAt", "startedAt", "created_at"),
    )
    completed_at: datetime | None = None
    processing_status: ProcessingStatus = ProcessingStatus.NONE

    # Legacy inline payloads
    summary: str | None = Field(default=None, exclude=True)
    transcript: str | None = Field(default=None, exclude=True)
    description_embedding: str | list[float] | None = Field(default=None, exclude=True)

    @field_validator("created_at", "completed_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("processing_status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        """Accept numeric and PascalCase statuses written by older versions."""
        if value is None:
            return ProcessingStatus.NONE
        if isinstance(value, int) and 0 <= value < len(_STATUS_ORDER):
            return _STATUS_ORDER[value]
        if isinstance(value, str):
            key = value.strip().lower().replace("_", "").replace("-", "")
            return _STATUS_BY_KEY.get(key, value)
        return value

    @property
    def has_legacy_payload(self) -> bool:
        return any(
            value is not None
            for value in (self.summary, self.transcript, self.description_embedding)
        )

    def to_domain(self, segment_root: Path) -> VideoEntry:
        """Build the domain entry, resolving the media path."""
        path = Path(self.video_path)
        if not path.is_absolute():
            path = segment_root / path
        return VideoEntry(
            id=self.id,
            title=normalize_title(self.title),
            description=normalize_description(self.description)
            or normalize_description(self.summary),
            tags=normalize_tags(self.tags),
            video_path=str(path),
            created_at=self.created_at,
            completed_at=self.completed_at,
            processing_status=self.processing_status,
        )

    @classmethod
    def from_domain(cls, entry: VideoEntry, segment_root: Path) -> "StoredVideoEntry":
        path = Path(entry.video_path)
        if path.is_relative_to(segment_root):
            path = path.relative_to(segment_root)
        return cls(
            id=entry.id,
            title=entry.title,
            description=entry.description,
            tags=list(entry.tags),
            video_path=path.as_posix(),
            created_at=entry.created_at,
            completed_at=entry.completed_at,
            processing_status=entry.processing_status,
        )


class IndexDocument(_CamelModel):
    """Root object of ``entries.json``."""

    schema_version: int = CURRENT_SCHEMA_VERSION
    entries: list[StoredVideoEntry] = Field(default_factory=list)
    preferences: StoredPreferences = Field(default_factory=StoredPreferences)

    @field_validator("entries", mode="before")
    @classmethod
    def null_entries(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("preferences", mode="before")
    @classmethod
    def null_preferences(cls, value: Any) -> Any:
        return {} if value is None else value

    def dump_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


@dataclass
class DecodedIndex:
    """Result of reading an index file."""

    document: IndexDocument
    needs_migration: bool = False
    decoder: str = "empty"


def _decode_current(raw: Any) -> IndexDocument | None:
    if not isinstance(raw, dict) or "schemaVersion" not in raw:
        return None
    return IndexDocument.model_validate(raw)


def _decode_legacy_document(raw: Any) -> IndexDocument | None:
    if not isinstance(raw, dict) or "entries" not in raw:
        return None
    return IndexDocument.model_validate(
        {"entries": raw.get("entries"), "preferences": raw.get("preferences")}
    )


def _decode_entry_array(raw: Any) -> IndexDocument | None:
    if not isinstance(raw, list):
        return None
    return IndexDocument.model_validate({"entries": raw})


_DECODERS: list[tuple[str, Callable[[Any], IndexDocument | None]]] = [
    ("current", _decode_current),
    ("legacy_document", _decode_legacy_document),
    ("entry_array", _decode_entry_array),
]


def decode_index(text: str) -> DecodedIndex:
    """Decode index file contents with the first decoder that accepts them.

    Raises:
        ValueError: If the text is not JSON or no decoder accepts it.
    """
    if not text.strip():
        return DecodedIndex(document=IndexDocument())

    raw = json.loads(text)
    errors: list[str] = []
    for name, decoder in _DECODERS:
        try:
            document = decoder(raw)
        except ValidationError as e:
            errors.append(f"{name}: {e.error_count()} validation errors")
            continue
        if document is None:
            continue
        needs_migration = name != "current" or any(
            entry.has_legacy_payload for entry in document.entries
        )
        document.schema_version = CURRENT_SCHEMA_VERSION
        return DecodedIndex(
            document=document,
            needs_migration=needs_migration,
            decoder=name,
        )

    msg = "Unrecognized index format" + (f" ({'; '.join(errors)})" if errors else "")
    raise ValueError(msg)
