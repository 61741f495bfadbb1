"""Resumable chunked uploads.

A client starts a session, appends chunks at byte offsets, and completes
the session, at which point the assembled temp file is handed to the
entry store. Sessions are kept in memory only.
"""

import asyncio
import shutil
from pathlib import Path
from typing import BinaryIO

from video_diary.commons.locks import KeyedLock
from video_diary.commons.settings.models import StorageSettings
from video_diary.commons.telemetry import get_logger
from video_diary.domain.models import UploadSession
from video_diary.domain.value_objects import resolve_segment, sanitize_path_component
from video_diary.infrastructure.storage.entry_store import UPLOADS_DIRECTORY, segment_root

DEFAULT_UPLOAD_NAME = "recording.webm"


def sanitize_file_name(file_name: str | None) -> str:
    """Strip path separators and other invalid characters from a client name."""
    return sanitize_path_component(file_name, DEFAULT_UPLOAD_NAME)


class ChunkedUploadStore:
    """Tracks upload sessions and assembles their temp files."""

    def __init__(self, settings: StorageSettings) -> None:
        """Initialize the upload store.

        Args:
            settings: Storage configuration; uploads live under each
                segment's ``uploads`` directory.
        """
        self._settings = settings
        self._root = Path(settings.root_directory).expanduser().resolve()
        self._sessions: dict[str, UploadSession] = {}
        self._locks = KeyedLock()
        self._logger = get_logger(__name__)

    def start(
        self,
        file_name: str | None,
        total_bytes: int = 0,
        *,
        segment: str | None = None,
    ) -> UploadSession:
        """Open a session with an empty temp file.

        Args:
            file_name: Client file name; sanitized, supplies the extension.
            total_bytes: Declared size, 0 when unknown.
            segment: Owning segment. Defaults to the current segment.

        Returns:
            The new session.
        """
        segment = resolve_segment(segment)
        name = sanitize_file_name(file_name)
        extension = Path(name).suffix or self._settings.default_extension

        session = UploadSession(
            user_segment=segment,
            temp_file_path=Path(),
            original_file_name=name,
            total_bytes=max(total_bytes, 0),
        )
        temp_path = segment_root(self._root, segment) / UPLOADS_DIRECTORY / (
            f"{session.id}{extension}"
        )
        temp_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path.touch()
        session = session.model_copy(update={"temp_file_path": temp_path})

        self._sessions[session.id] = session
        self._logger.info(
            "Started upload",
            extra={
                "upload_id": session.id,
                "segment": segment,
                "file_name": name,
                "total_bytes": session.total_bytes,
            },
        )
        return session

    def get(self, session_id: str, *, segment: str | None = None) -> UploadSession | None:
        """Return an owned session, or None."""
        session = self._sessions.get(session_id)
        if session is None or not _owned_by(session, resolve_segment(segment)):
            return None
        return session

    async def append_chunk(
        self,
        session_id: str,
        chunk: bytes | BinaryIO,
        offset: int = -1,
        total_bytes: int = 0,
        *,
        segment: str | None = None,
    ) -> int | None:
        """Write a chunk at ``offset``.

        A negative offset appends at the current end. An offset beyond the
        current end is clamped to it, so a skipped range can never leave a
        hole in the file.

        Args:
            session_id: Session to append to.
            chunk: Chunk bytes or a readable binary stream.
            offset: Byte offset of the chunk, negative to append.
            total_bytes: Declared total; only ever raises the tracked total.
            segment: Caller segment. Defaults to the current segment.

        Returns:
            The new file length, or None for unknown or foreign sessions.
        """
        segment = resolve_segment(segment)
        if self.get(session_id, segment=segment) is None:
            return None

        async with self._locks(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                return None

            loop = asyncio.get_running_loop()
            length, clamped = await loop.run_in_executor(
                None, _write_chunk, session.temp_file_path, chunk, offset
            )
            if clamped is not None:
                requested, current = clamped
                self._logger.warning(
                    "Out-of-order chunk clamped to current length",
                    extra={
                        "upload_id": session_id,
                        "offset": requested,
                        "current_length": current,
                    },
                )

            updated = session.with_progress(
                uploaded_bytes=length,
                total_bytes=max(session.total_bytes, total_bytes),
            )
            # Completed or cancelled while the chunk was being written
            if session_id not in self._sessions:
                return None
            self._sessions[session_id] = updated

        tolerance = self._settings.upload_overflow_tolerance_bytes
        if updated.total_bytes > 0 and length > updated.total_bytes + tolerance:
            self._logger.warning(
                "Upload exceeded declared size",
                extra={
                    "upload_id": session_id,
                    "expected_bytes": updated.total_bytes,
                    "received_bytes": length,
                },
            )
        return length

    async def complete(
        self, session_id: str, *, segment: str | None = None
    ) -> UploadSession | None:
        """Close a session and hand back its assembled file.

        Waits for an in-flight chunk of the same session to finish writing.

        Returns:
            The session with ``uploaded_bytes`` equal to the file size on
            disk, or None for unknown or foreign sessions.
        """
        async with self._locks(session_id):
            session = self.get(session_id, segment=segment)
            if session is None:
                return None
            del self._sessions[session_id]

        size = session.temp_file_path.stat().st_size if session.temp_file_path.exists() else 0
        self._logger.info(
            "Completed upload",
            extra={
                "upload_id": session_id,
                "segment": session.user_segment,
                "uploaded_bytes": size,
                "declared_bytes": session.total_bytes,
            },
        )
        return session.with_progress(uploaded_bytes=size, total_bytes=session.total_bytes)

    async def cancel(self, session_id: str, *, segment: str | None = None) -> bool:
        """Drop a session and delete its temp file."""
        async with self._locks(session_id):
            session = self.get(session_id, segment=segment)
            if session is None:
                return False
            del self._sessions[session_id]
            discard_temp_file(session.temp_file_path)
        self._logger.info("Cancelled upload", extra={"upload_id": session_id})
        return True


def discard_temp_file(path: Path) -> None:
    """Delete an upload temp file, ignoring files that are already gone."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        get_logger(__name__).warning(
            "Failed to delete upload temp file",
            extra={"path": str(path), "error": str(e)},
        )


def _owned_by(session: UploadSession, segment: str) -> bool:
    return session.user_segment.casefold() == segment.casefold()


def _write_chunk(
    path: Path,
    chunk: bytes | BinaryIO,
    offset: int,
) -> tuple[int, tuple[int, int] | None]:
    """Write a chunk.

    Returns:
        The new file length, and ``(requested, current)`` offsets when the
        requested offset had to be clamped.
    """
    with path.open("r+b") as f:
        current = f.seek(0, 2)
        target = offset if offset >= 0 else current
        clamped = None
        if target > current:
            clamped = (target, current)
            target = current
        f.seek(target)
        if isinstance(chunk, bytes | bytearray | memoryview):
            f.write(chunk)
        else:
            shutil.copyfileobj(chunk, f, length=1024 * 1024)
        length = f.seek(0, 2)
    return length, clamped
