"""Filesystem-backed entry store.

Layout under ``StorageSettings.root_directory``::

    default/                    anonymous segment
        entries.json
        2025-Jan-01 10.00.00 - Trip.webm
        2025-Jan-01 10.00.00 - Trip.txt
        2025-Jan-01 10.00.00 - Trip.webm.embeddings
        uploads/
    users/<segment>/            one directory per authenticated user
"""

import asyncio
import os
import shutil
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from video_diary.commons.locks import KeyedLock
from video_diary.commons.settings.models import StorageSettings
from video_diary.commons.telemetry import get_logger
from video_diary.domain.exceptions import StorageException
from video_diary.domain.models import (
    EntryUpdateRequest,
    ProcessingStatus,
    UserPreferences,
    VideoEntry,
)
from video_diary.domain.value_objects import (
    DEFAULT_SEGMENT,
    resolve_segment,
    sanitize_path_component,
)
from video_diary.infrastructure.storage import sidecars
from video_diary.infrastructure.storage.base import (
    DeleteMode,
    DescriptionEmbedder,
    EntryStoreBase,
)
from video_diary.infrastructure.storage.embedding_codec import decode_legacy
from video_diary.infrastructure.storage.index_document import (
    IndexDocument,
    StoredPreferences,
    StoredVideoEntry,
    decode_index,
)

USERS_DIRECTORY = "users"
UPLOADS_DIRECTORY = "uploads"


@dataclass
class _SegmentState:
    """Cached contents of one segment's index."""

    root: Path
    entries: dict[str, VideoEntry] = field(default_factory=dict)
    preferences: UserPreferences = field(default_factory=UserPreferences)


def segment_root(root_directory: Path, segment: str) -> Path:
    """Directory holding a segment's index and media."""
    if segment == DEFAULT_SEGMENT:
        return root_directory / DEFAULT_SEGMENT
    return root_directory / USERS_DIRECTORY / segment


class FileSystemEntryStore(EntryStoreBase):
    """Entry store keeping an in-memory cache per segment over ``entries.json``.

    Each segment is loaded from disk on first access. Every read and
    mutation of a segment runs under that segment's lock, and every
    mutation rewrites the whole index through a temporary file so an
    interrupted write never corrupts the previous index.
    """

    def __init__(
        self,
        settings: StorageSettings,
        embed_description: DescriptionEmbedder | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            settings: Storage configuration.
            embed_description: Optional embedding producer. When omitted,
                embeddings are left for the search index to generate.
        """
        self._settings = settings
        self._root = Path(settings.root_directory).expanduser().resolve()
        self._embed_description = embed_description
        self._segments: dict[str, _SegmentState] = {}
        self._locks = KeyedLock()
        self._logger = get_logger(__name__)

    @property
    def root_directory(self) -> Path:
        return self._root

    def segment_root(self, segment: str | None = None) -> Path:
        return segment_root(self._root, resolve_segment(segment))

    def uploads_directory(self, segment: str | None = None) -> Path:
        return self.segment_root(segment) / UPLOADS_DIRECTORY

    # =========================================================================
    # Entries
    # =========================================================================

    async def save(
        self,
        media: BinaryIO | Path,
        original_file_name: str,
        metadata: EntryUpdateRequest,
        *,
        processing_status: ProcessingStatus = ProcessingStatus.NONE,
        segment: str | None = None,
    ) -> VideoEntry:
        """Write the media file, its sidecars and the index entry."""
        segment = resolve_segment(segment)
        metadata = metadata.normalized()
        embedding = await self._embed(metadata.description)

        root = segment_root(self._root, segment)
        entry = VideoEntry(
            title=metadata.title,
            description=metadata.description,
            tags=metadata.tags,
            video_path="",
            created_at=datetime.now(UTC),
            processing_status=processing_status,
        )

        # Media is written outside the segment lock; only the index is guarded
        loop = asyncio.get_running_loop()
        target: Path | None = None
        for candidate in self._media_candidates(root, entry, original_file_name):
            try:
                await loop.run_in_executor(None, _write_media, media, candidate)
            except FileExistsError:
                continue
            except OSError as e:
                candidate.unlink(missing_ok=True)
                raise StorageException("save_media", str(e)) from e
            target = candidate
            break
        if target is None:
            raise StorageException("save_media", "no free file name for media")
        entry = entry.model_copy(update={"video_path": str(target)})

        try:
            if metadata.transcript:
                sidecars.write_transcript(target, metadata.transcript)
            if embedding:
                sidecars.write_embedding(target, embedding)
        except OSError as e:
            sidecars.delete_media_and_sidecars(target)
            raise StorageException("save_sidecars", str(e)) from e

        async with self._gate(segment) as state:
            state.entries[entry.id] = entry
            try:
                self._persist(segment, state)
            except StorageException:
                sidecars.delete_media_and_sidecars(target)
                raise

        self._logger.info(
            "Saved entry",
            extra={
                "entry_id": entry.id,
                "segment": segment,
                "video_path": entry.video_path,
                "status": processing_status.value,
            },
        )
        return entry.with_embedding(embedding)

    async def list_entries(self, *, segment: str | None = None) -> list[VideoEntry]:
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            entries = sorted(
                state.entries.values(), key=lambda e: e.created_at, reverse=True
            )
        return [self._hydrate(entry) for entry in entries]

    async def get(self, entry_id: str, *, segment: str | None = None) -> VideoEntry | None:
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            entry = state.entries.get(entry_id)
        return self._hydrate(entry) if entry else None

    async def update(
        self,
        entry_id: str,
        request: EntryUpdateRequest,
        *,
        segment: str | None = None,
    ) -> VideoEntry | None:
        """Apply new metadata to an entry.

        The description embedding is only regenerated when the description
        text changed. A changed title renames the media file and its
        sidecars; a rename that would overwrite another file, or that
        fails, keeps the old path.
        """
        segment = resolve_segment(segment)
        request = request.normalized()

        current = await self.get(entry_id, segment=segment)
        if current is None:
            return None
        embedding = (
            await self._embed(request.description)
            if current.description != request.description
            else None
        )

        async with self._gate(segment) as state:
            existing = state.entries.get(entry_id)
            if existing is None:
                return None

            description_changed = existing.description != request.description
            if existing.description != current.description and description_changed:
                # Another update changed the description while embedding
                embedding = await self._embed(request.description)

            video_path = existing.video_path
            if existing.title != request.title:
                video_path = self._rename_media(existing, request.title)

            updated = existing.model_copy(
                update={
                    "title": request.title,
                    "description": request.description,
                    "tags": request.tags,
                    "video_path": video_path,
                    "completed_at": datetime.now(UTC),
                }
            )

            try:
                if request.transcript:
                    sidecars.write_transcript(video_path, request.transcript)
                if description_changed:
                    # A stale embedding is worse than none; search regenerates it
                    sidecars.write_embedding(video_path, embedding)
            except OSError as e:
                self._restore_media(entry_id, video_path, existing.video_path)
                raise StorageException("update_sidecars", str(e)) from e

            state.entries[entry_id] = updated
            try:
                self._persist(segment, state)
            except StorageException:
                if description_changed:
                    sidecars.delete_embedding(video_path)
                self._restore_media(entry_id, video_path, existing.video_path)
                raise

        self._logger.info(
            "Updated entry",
            extra={
                "entry_id": entry_id,
                "segment": segment,
                "description_changed": description_changed,
                "renamed": video_path != existing.video_path,
            },
        )
        return self._hydrate(updated)

    async def delete(
        self,
        entry_id: str,
        mode: DeleteMode = DeleteMode.DEEP,
        *,
        segment: str | None = None,
    ) -> bool:
        """Remove an entry from the index.

        Deep deletion removes the media and sidecars once the index no
        longer lists the entry. Soft deletion keeps the media and leaves a
        snapshot of the entry in a deletion marker.
        """
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            entry = state.entries.pop(entry_id, None)
            if entry is None:
                return False

            if mode == DeleteMode.SOFT:
                try:
                    sidecars.write_deletion_marker(
                        entry.video_path,
                        {
                            **entry.model_dump(mode="json"),
                            "deletedAt": datetime.now(UTC).isoformat(),
                        },
                    )
                except OSError as e:
                    state.entries[entry_id] = entry
                    raise StorageException("soft_delete", str(e)) from e

            try:
                self._persist(segment, state)
            except StorageException:
                state.entries[entry_id] = entry
                if mode == DeleteMode.SOFT:
                    sidecars.delete_deletion_marker(entry.video_path)
                raise

            if mode == DeleteMode.DEEP:
                sidecars.delete_media_and_sidecars(entry.video_path)

        self._logger.info(
            "Deleted entry",
            extra={"entry_id": entry_id, "segment": segment, "mode": mode.value},
        )
        return True

    async def update_processing_status(
        self,
        entry_id: str,
        status: ProcessingStatus,
        *,
        segment: str | None = None,
    ) -> bool:
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            entry = state.entries.get(entry_id)
            if entry is None:
                return False
            if entry.processing_status != status:
                state.entries[entry_id] = entry.with_status(status)
                self._persist(segment, state)
        return True

    async def update_description_embedding(
        self,
        entry_id: str,
        embedding: list[float] | None,
        *,
        segment: str | None = None,
    ) -> bool:
        """Replace the description embedding sidecar.

        The index is rewritten as for any other targeted mutation, even
        though embeddings only live in sidecars.
        """
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            entry = state.entries.get(entry_id)
            if entry is None:
                return False
            try:
                sidecars.write_embedding(entry.video_path, embedding)
            except OSError as e:
                raise StorageException("write_embedding", str(e)) from e
            self._persist(segment, state)
        return True

    async def read_transcript(
        self,
        entry_id: str,
        *,
        segment: str | None = None,
    ) -> str | None:
        entry = await self.get(entry_id, segment=segment)
        if entry is None:
            return None
        return sidecars.read_transcript(entry.video_path)

    # =========================================================================
    # Preferences and segments
    # =========================================================================

    async def get_preferences(self, *, segment: str | None = None) -> UserPreferences:
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            return state.preferences

    async def update_preferences(
        self,
        preferences: UserPreferences,
        *,
        segment: str | None = None,
    ) -> UserPreferences:
        segment = resolve_segment(segment)
        async with self._gate(segment) as state:
            state.preferences = preferences.normalized()
            self._persist(segment, state)
            return state.preferences

    async def list_segments(self) -> list[str]:
        """Segments with an index on disk, plus any loaded in this process."""
        found = set(self._segments)
        if (self._root / DEFAULT_SEGMENT / self._settings.index_file_name).is_file():
            found.add(DEFAULT_SEGMENT)
        users = self._root / USERS_DIRECTORY
        if users.is_dir():
            found.update(
                child.name
                for child in users.iterdir()
                if (child / self._settings.index_file_name).is_file()
            )
        return sorted(found)

    def invalidate_cache(self, segment: str | None = None) -> None:
        """Drop cached state so the next access reloads from disk.

        Args:
            segment: Segment to drop. All segments when None.
        """
        if segment is None:
            self._segments.clear()
        else:
            self._segments.pop(resolve_segment(segment), None)

    # =========================================================================
    # Internals
    # =========================================================================

    @asynccontextmanager
    async def _gate(self, segment: str) -> AsyncIterator[_SegmentState]:
        """Hold the segment lock, loading the segment on first use."""
        async with self._locks(segment):
            state = self._segments.get(segment)
            if state is None:
                state = self._load(segment)
                self._segments[segment] = state
            yield state

    def _load(self, segment: str) -> _SegmentState:
        root = segment_root(self._root, segment)
        state = _SegmentState(root=root)
        index_file = root / self._settings.index_file_name
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageException("create_segment_root", str(e)) from e

        if not index_file.is_file():
            return state

        try:
            decoded = decode_index(index_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            self._logger.warning(
                "Unreadable entry index, starting empty",
                extra={"segment": segment, "path": str(index_file), "error": str(e)},
            )
            self._preserve_unreadable(index_file)
            return state

        for stored in decoded.document.entries:
            entry = stored.to_domain(root)
            if stored.has_legacy_payload:
                self._migrate_inline_payloads(stored, entry)
            state.entries[entry.id] = entry
        state.preferences = decoded.document.preferences.to_domain()

        self._logger.info(
            "Loaded entry index",
            extra={
                "segment": segment,
                "entries": len(state.entries),
                "decoder": decoded.decoder,
            },
        )
        if decoded.needs_migration:
            self._persist(segment, state)
            self._logger.info(
                "Migrated entry index",
                extra={"segment": segment, "decoder": decoded.decoder},
            )
        return state

    def _migrate_inline_payloads(self, stored: StoredVideoEntry, entry: VideoEntry) -> None:
        """Move inline transcript and embedding values into sidecars."""
        try:
            if stored.transcript and stored.transcript.strip():
                if not sidecars.transcript_path(entry.video_path).exists():
                    sidecars.write_transcript(entry.video_path, stored.transcript)
            embedding = decode_legacy(stored.description_embedding)
            if embedding and not sidecars.embedding_path(entry.video_path).exists():
                sidecars.write_embedding(entry.video_path, embedding)
        except OSError as e:
            self._logger.warning(
                "Failed to migrate inline payloads",
                extra={"entry_id": entry.id, "error": str(e)},
            )

    def _preserve_unreadable(self, index_file: Path) -> None:
        stamp = datetime.now(UTC).strftime("%Y%m%d%H%M%S")
        backup = index_file.with_name(f"{index_file.name}.unreadable-{stamp}")
        try:
            index_file.replace(backup)
        except OSError as e:
            self._logger.warning(
                "Failed to preserve unreadable index",
                extra={"path": str(index_file), "error": str(e)},
            )

    def _persist(self, segment: str, state: _SegmentState) -> None:
        """Atomically rewrite the segment's index.

        On failure the segment cache is dropped so the next access reloads
        the last index that reached the disk.
        """
        document = IndexDocument(
            entries=[
                StoredVideoEntry.from_domain(entry, state.root)
                for entry in sorted(state.entries.values(), key=lambda e: e.created_at)
            ],
            preferences=StoredPreferences.from_domain(state.preferences),
        )
        index_file = state.root / self._settings.index_file_name
        temp_file = index_file.with_name(f"{index_file.name}.tmp")
        try:
            state.root.mkdir(parents=True, exist_ok=True)
            temp_file.write_text(document.dump_json(), encoding="utf-8")
            os.replace(temp_file, index_file)
        except OSError as e:
            self._segments.pop(segment, None)
            temp_file.unlink(missing_ok=True)
            self._logger.error(
                "Failed to write entry index",
                extra={"segment": segment, "path": str(index_file), "error": str(e)},
            )
            raise StorageException("persist_index", str(e)) from e

    def _hydrate(self, entry: VideoEntry) -> VideoEntry:
        try:
            embedding = sidecars.read_embedding(entry.video_path)
        except OSError as e:
            self._logger.warning(
                "Failed to read embedding sidecar",
                extra={"entry_id": entry.id, "error": str(e)},
            )
            embedding = None
        return entry.with_embedding(embedding or None)

    async def _embed(self, description: str | None) -> list[float] | None:
        if not description or self._embed_description is None:
            return None
        return await self._embed_description(description)

    def _media_candidates(
        self,
        root: Path,
        entry: VideoEntry,
        original_file_name: str,
    ) -> list[Path]:
        """File names to try for new media, preferred first."""
        extension = Path(original_file_name or "").suffix or self._settings.default_extension
        stem = self._media_stem(entry.created_at, entry.title)
        return [
            root / f"{stem}{extension}",
            root / f"{stem} ({entry.id[:8]}){extension}",
            root / f"{stem} ({entry.id}){extension}",
        ]

    def _media_stem(self, created_at: datetime, title: str) -> str:
        timestamp = created_at.strftime(self._settings.file_name_format)
        safe_title = sanitize_path_component(title, "untitled")
        return f"{timestamp} - {safe_title}".replace('"', "_")

    def _rename_media(self, entry: VideoEntry, new_title: str) -> str:
        """Rename media and sidecars for a new title, returning the final path."""
        source = Path(entry.video_path)
        target = source.with_name(
            f"{self._media_stem(entry.created_at, new_title)}{source.suffix}"
        )
        if target == source:
            return entry.video_path
        if target.exists():
            self._logger.warning(
                "Rename target exists, keeping media path",
                extra={"entry_id": entry.id, "target": str(target)},
            )
            return entry.video_path
        try:
            source.rename(target)
        except OSError as e:
            self._logger.warning(
                "Failed to rename media, keeping media path",
                extra={"entry_id": entry.id, "target": str(target), "error": str(e)},
            )
            return entry.video_path
        sidecars.move_sidecars(source, target)
        return str(target)

    def _restore_media(self, entry_id: str, video_path: str, original_path: str) -> None:
        """Undo a rename so the media matches the index still on disk."""
        if video_path == original_path:
            return
        try:
            Path(video_path).rename(original_path)
        except OSError as e:
            self._logger.error(
                "Failed to restore media path",
                extra={
                    "entry_id": entry_id,
                    "path": video_path,
                    "original_path": original_path,
                    "error": str(e),
                },
            )
            return
        sidecars.move_sidecars(video_path, original_path)


def _write_media(media: BinaryIO | Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(media, Path):
        if target.exists():
            raise FileExistsError(str(target))
        shutil.move(str(media), str(target))
        return
    with target.open("xb") as out:
        shutil.copyfileobj(media, out, length=1024 * 1024)
