"""Unit tests for entry, preference, upload and search models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from video_diary.domain.models import (
    DEFAULT_TITLE,
    DEFAULT_TRANSCRIPT_LANGUAGE,
    EntryUpdateRequest,
    ProcessingRequest,
    ProcessingStatus,
    SearchQuery,
    UploadSession,
    UserPreferences,
    VideoEntry,
    merge_tags,
    normalize_description,
    normalize_tags,
    normalize_title,
)


class TestNormalization:
    """Tests for title, description and tag normalization."""

    def test_title(self):
        assert normalize_title("  Morning run ") == "Morning run"
        assert normalize_title("   ") == DEFAULT_TITLE
        assert normalize_title(None) == DEFAULT_TITLE

    def test_description(self):
        assert normalize_description(" notes ") == "notes"
        assert normalize_description("  ") is None
        assert normalize_description(None) is None

    def test_tags_case_insensitive_dedup(self):
        assert normalize_tags([" Trip", "trip", "", None, "Family", "TRIP"]) == [
            "Trip",
            "Family",
        ]

    def test_tags_none(self):
        assert normalize_tags(None) == []

    def test_merge_keeps_existing_spelling(self):
        assert merge_tags(["Work"], ["work", "Health"]) == ["Work", "Health"]


class TestVideoEntry:
    """Tests for VideoEntry model."""

    def test_defaults(self):
        entry = VideoEntry(video_path="/data/default/a.webm")
        assert entry.title == DEFAULT_TITLE
        assert entry.description is None
        assert entry.tags == []
        assert entry.processing_status == ProcessingStatus.NONE
        assert entry.completed_at is None
        assert entry.created_at.tzinfo is not None
        assert len(entry.id) == 36

    def test_has_user_title(self):
        assert VideoEntry(video_path="a").has_user_title is False
        assert VideoEntry(video_path="a", title="Run").has_user_title is True

    def test_is_processing(self):
        entry = VideoEntry(video_path="a")
        assert entry.is_processing is False
        assert entry.with_status(ProcessingStatus.IN_PROGRESS).is_processing is True

    def test_with_status_returns_copy(self):
        entry = VideoEntry(video_path="a")
        updated = entry.with_status(ProcessingStatus.COMPLETED)
        assert updated.processing_status == ProcessingStatus.COMPLETED
        assert entry.processing_status == ProcessingStatus.NONE
        assert updated.id == entry.id

    def test_embedding_not_serialized(self):
        entry = VideoEntry(video_path="a").with_embedding([0.1, 0.2])
        assert entry.description_embedding == [0.1, 0.2]
        assert "description_embedding" not in entry.model_dump()
        assert "description_embedding" not in entry.model_dump_json()

    def test_json_round_trip_keeps_status(self):
        entry = VideoEntry(
            video_path="a",
            tags=["Trip"],
            processing_status=ProcessingStatus.FAILED,
        )
        restored = VideoEntry.model_validate_json(entry.model_dump_json())
        assert restored == entry


class TestEntryUpdateRequest:
    """Tests for EntryUpdateRequest normalization."""

    def test_normalized(self):
        request = EntryUpdateRequest(
            title="  ",
            description=" Summary ",
            tags=["a", "A", " b "],
            transcript="  hello  ",
        ).normalized()

        assert request.title == DEFAULT_TITLE
        assert request.description == "Summary"
        assert request.tags == ["a", "b"]
        assert request.transcript == "hello"

    def test_blank_transcript_becomes_none(self):
        assert EntryUpdateRequest(transcript="   ").normalized().transcript is None


class TestProcessingRequest:
    """Tests for ProcessingRequest."""

    def test_frozen(self):
        request = ProcessingRequest(entry_id="e1", user_segment="alice")
        assert request.user_provided_title is False
        with pytest.raises(ValidationError):
            request.entry_id = "e2"  # type: ignore[misc]


class TestUserPreferences:
    """Tests for UserPreferences."""

    def test_defaults(self):
        prefs = UserPreferences()
        assert prefs.transcript_language == DEFAULT_TRANSCRIPT_LANGUAGE
        assert prefs.favorite_tags == []
        assert prefs.is_english is True

    def test_normalized(self):
        prefs = UserPreferences(
            camera_device_id="  ",
            microphone_device_id=" mic-1 ",
            transcript_language=" ",
            favorite_tags=["Work", "work", " Health "],
        ).normalized()

        assert prefs.camera_device_id is None
        assert prefs.microphone_device_id == "mic-1"
        assert prefs.transcript_language == DEFAULT_TRANSCRIPT_LANGUAGE
        assert prefs.favorite_tags == ["Work", "Health"]

    def test_iso_language(self):
        prefs = UserPreferences(transcript_language="es-AR")
        assert prefs.iso_language == "es"
        assert prefs.is_english is False
        assert UserPreferences(transcript_language="DE").iso_language == "de"


class TestSearchQuery:
    """Tests for SearchQuery text selection."""

    def test_keyword_preferred(self):
        query = SearchQuery(keyword=" beach ", vector_query="summer trips")
        assert query.keyword_text == "beach"
        assert query.semantic_text == "summer trips"

    def test_keyword_falls_back_to_vector_query(self):
        query = SearchQuery(keyword="  ", vector_query=" summer ")
        assert query.keyword_text == "summer"

    def test_empty(self):
        query = SearchQuery()
        assert query.keyword_text is None
        assert query.semantic_text is None


class TestUploadSession:
    """Tests for UploadSession."""

    def test_progress(self):
        session = UploadSession(
            user_segment="default",
            temp_file_path=Path("/tmp/x.upload"),
            original_file_name="clip.webm",
        )
        assert session.is_complete is False
        assert len(session.id) == 32

        updated = session.with_progress(uploaded_bytes=10, total_bytes=10)
        assert updated.is_complete is True
        assert session.uploaded_bytes == 0

    def test_unknown_total_never_complete(self):
        session = UploadSession(
            user_segment="default",
            temp_file_path=Path("/tmp/x.upload"),
            original_file_name="clip.webm",
            uploaded_bytes=100,
        )
        assert session.is_complete is False
