"""Unit tests for entries.json decoding."""

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from video_diary.domain.models import ProcessingStatus, UserPreferences, VideoEntry
from video_diary.infrastructure.storage.index_document import (
    CURRENT_SCHEMA_VERSION,
    IndexDocument,
    StoredPreferences,
    StoredVideoEntry,
    decode_index,
)

ROOT = Path("/data/default")


def _entry(**overrides):
    entry = {
        "id": "e1",
        "title": "Trip",
        "videoPath": "2025-Jan-01 10.00.00 - Trip.webm",
        "createdAt": "2025-01-01T10:00:00+00:00",
        "processingStatus": "completed",
    }
    entry.update(overrides)
    return entry


class TestDecodeIndex:
    """Tests for decode_index."""

    def test_empty_text(self):
        decoded = decode_index("   ")
        assert decoded.document.entries == []
        assert decoded.needs_migration is False
        assert decoded.decoder == "empty"

    def test_current_schema(self):
        text = json.dumps(
            {
                "schemaVersion": CURRENT_SCHEMA_VERSION,
                "entries": [_entry()],
                "preferences": {"favoriteTags": ["Work"]},
            }
        )

        decoded = decode_index(text)

        assert decoded.decoder == "current"
        assert decoded.needs_migration is False
        assert decoded.document.entries[0].title == "Trip"
        assert decoded.document.preferences.favorite_tags == ["Work"]

    def test_legacy_document(self):
        entry = _entry(summary="Went hiking", transcript="we walked")
        del entry["createdAt"]
        entry["startedAt"] = "2024-05-01T08:00:00"
        text = json.dumps({"entries": [entry], "preferences": None})

        decoded = decode_index(text)

        assert decoded.decoder == "legacy_document"
        assert decoded.needs_migration is True
        stored = decoded.document.entries[0]
        assert stored.created_at == datetime(2024, 5, 1, 8, 0, tzinfo=UTC)
        assert stored.has_legacy_payload is True
        assert decoded.document.schema_version == CURRENT_SCHEMA_VERSION

    def test_entry_array(self):
        decoded = decode_index(json.dumps([_entry(processingStatus=2)]))

        assert decoded.decoder == "entry_array"
        assert decoded.needs_migration is True
        assert decoded.document.entries[0].processing_status == ProcessingStatus.COMPLETED

    def test_current_with_inline_payload_needs_migration(self):
        text = json.dumps(
            {
                "schemaVersion": CURRENT_SCHEMA_VERSION,
                "entries": [_entry(descriptionEmbedding=[0.5, 0.5])],
            }
        )
        assert decode_index(text).needs_migration is True

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("InProgress", ProcessingStatus.IN_PROGRESS),
            ("in_progress", ProcessingStatus.IN_PROGRESS),
            ("Failed", ProcessingStatus.FAILED),
            (0, ProcessingStatus.NONE),
            (None, ProcessingStatus.NONE),
        ],
    )
    def test_status_spellings(self, raw, expected):
        decoded = decode_index(json.dumps([_entry(processingStatus=raw)]))
        assert decoded.document.entries[0].processing_status == expected

    def test_null_entries(self):
        decoded = decode_index(json.dumps({"schemaVersion": 2, "entries": None}))
        assert decoded.document.entries == []

    def test_not_json(self):
        with pytest.raises(ValueError):
            decode_index("{not json")

    def test_unrecognized(self):
        with pytest.raises(ValueError, match="Unrecognized index format"):
            decode_index(json.dumps({"something": "else"}))


class TestStoredVideoEntry:
    """Tests for conversion between stored and domain entries."""

    def test_relative_path_resolved(self):
        stored = StoredVideoEntry.model_validate(_entry())
        entry = stored.to_domain(ROOT)
        assert entry.video_path == str(ROOT / "2025-Jan-01 10.00.00 - Trip.webm")

    def test_summary_fills_missing_description(self):
        stored = StoredVideoEntry.model_validate(_entry(summary=" Hiking "))
        assert stored.to_domain(ROOT).description == "Hiking"

    def test_description_wins_over_summary(self):
        stored = StoredVideoEntry.model_validate(
            _entry(description="Own words", summary="Generated")
        )
        assert stored.to_domain(ROOT).description == "Own words"

    def test_blank_title_normalized(self):
        stored = StoredVideoEntry.model_validate(_entry(title="  ", tags=["a", "A"]))
        entry = stored.to_domain(ROOT)
        assert entry.title == "Untitled"
        assert entry.tags == ["a"]

    def test_from_domain_relativizes_path(self):
        entry = VideoEntry(video_path=str(ROOT / "clip.webm"), title="Clip")
        stored = StoredVideoEntry.from_domain(entry, ROOT)
        assert stored.video_path == "clip.webm"

    def test_from_domain_keeps_foreign_path(self):
        entry = VideoEntry(video_path="/elsewhere/clip.webm")
        stored = StoredVideoEntry.from_domain(entry, ROOT)
        assert stored.video_path == "/elsewhere/clip.webm"

    def test_legacy_payloads_not_written(self):
        stored = StoredVideoEntry.model_validate(
            _entry(summary="s", transcript="t", descriptionEmbedding="AAAA")
        )
        data = json.loads(IndexDocument(entries=[stored]).dump_json())
        written = data["entries"][0]
        assert "summary" not in written
        assert "transcript" not in written
        assert "descriptionEmbedding" not in written
        assert written["createdAt"].startswith("2025-01-01T10:00:00")
        assert data["schemaVersion"] == CURRENT_SCHEMA_VERSION


class TestStoredPreferences:
    """Tests for preference conversion."""

    def test_round_trip(self):
        prefs = UserPreferences(transcript_language="es-AR", favorite_tags=["Work"])
        stored = StoredPreferences.from_domain(prefs)
        assert stored.to_domain() == prefs

    def test_missing_values_normalized(self):
        prefs = StoredPreferences().to_domain()
        assert prefs.transcript_language == "en-US"
        assert prefs.favorite_tags == []
