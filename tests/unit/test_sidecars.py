"""Unit tests for media sidecar files."""

import json

from video_diary.infrastructure.storage import sidecars


class TestSidecarPaths:
    """Tests for sidecar naming."""

    def test_names(self, tmp_path):
        video = tmp_path / "clip.webm"
        assert sidecars.transcript_path(video) == tmp_path / "clip.txt"
        assert sidecars.embedding_path(video) == tmp_path / "clip.webm.embeddings"
        assert sidecars.deletion_marker_path(video) == tmp_path / "clip.webm.DELETED"


class TestTranscriptSidecar:
    """Tests for transcript read/write."""

    def test_missing(self, tmp_path):
        assert sidecars.read_transcript(tmp_path / "clip.webm") is None

    def test_write_and_read(self, tmp_path):
        video = tmp_path / "clip.webm"
        sidecars.write_transcript(video, "hello world")
        assert sidecars.read_transcript(video) == "hello world"


class TestEmbeddingSidecar:
    """Tests for embedding read/write."""

    def test_write_and_read(self, tmp_path):
        video = tmp_path / "clip.webm"
        sidecars.write_embedding(video, [0.5, 0.25])
        assert sidecars.read_embedding(video) == [0.5, 0.25]
        assert sidecars.embedding_path(video).stat().st_size == 8

    def test_none_removes(self, tmp_path):
        video = tmp_path / "clip.webm"
        sidecars.write_embedding(video, [1.0])
        sidecars.write_embedding(video, None)
        assert sidecars.read_embedding(video) is None

    def test_empty_removes(self, tmp_path):
        video = tmp_path / "clip.webm"
        sidecars.write_embedding(video, [1.0])
        sidecars.write_embedding(video, [])
        assert not sidecars.embedding_path(video).exists()


class TestMoveAndDelete:
    """Tests for moving and deleting sidecars with their media."""

    def test_move_sidecars(self, tmp_path):
        old = tmp_path / "old.webm"
        new = tmp_path / "new.webm"
        sidecars.write_transcript(old, "text")
        sidecars.write_embedding(old, [1.0])

        sidecars.move_sidecars(old, new)

        assert sidecars.read_transcript(new) == "text"
        assert sidecars.read_embedding(new) == [1.0]
        assert not sidecars.transcript_path(old).exists()

    def test_move_does_not_overwrite(self, tmp_path):
        old = tmp_path / "old.webm"
        new = tmp_path / "new.webm"
        sidecars.write_transcript(old, "old text")
        sidecars.write_transcript(new, "new text")

        sidecars.move_sidecars(old, new)

        assert sidecars.read_transcript(new) == "new text"
        assert sidecars.read_transcript(old) == "old text"

    def test_delete_media_and_sidecars(self, tmp_path):
        video = tmp_path / "clip.webm"
        video.write_bytes(b"data")
        sidecars.write_transcript(video, "text")
        sidecars.write_embedding(video, [1.0])
        sidecars.write_deletion_marker(video, {"id": "e1"})

        sidecars.delete_media_and_sidecars(video)

        assert list(tmp_path.iterdir()) == []

    def test_deletion_marker_snapshot(self, tmp_path):
        video = tmp_path / "clip.webm"
        marker = sidecars.write_deletion_marker(video, {"id": "e1", "title": "Run"})
        assert json.loads(marker.read_text(encoding="utf-8"))["title"] == "Run"
