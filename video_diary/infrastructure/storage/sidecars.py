"""Files stored next to a media file.

For ``clip.webm`` the sidecars are:

* ``clip.txt``: transcript (extension replaced)
* ``clip.webm.embeddings``: description embedding (suffix appended)
* ``clip.webm.DELETED``: soft-delete marker with an entry snapshot
"""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from video_diary.commons.telemetry import get_logger
from video_diary.infrastructure.storage.embedding_codec import (
    deserialize_binary,
    serialize_binary,
)

logger = get_logger(__name__)

TRANSCRIPT_EXTENSION = ".txt"
EMBEDDING_SUFFIX = ".embeddings"
DELETION_MARKER_SUFFIX = ".DELETED"


def transcript_path(video_path: str | Path) -> Path:
    return Path(video_path).with_suffix(TRANSCRIPT_EXTENSION)


def embedding_path(video_path: str | Path) -> Path:
    path = Path(video_path)
    return path.with_name(path.name + EMBEDDING_SUFFIX)


def deletion_marker_path(video_path: str | Path) -> Path:
    path = Path(video_path)
    return path.with_name(path.name + DELETION_MARKER_SUFFIX)


def read_transcript(video_path: str | Path) -> str | None:
    """Return the transcript text, or None when there is no sidecar."""
    path = transcript_path(video_path)
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def write_transcript(video_path: str | Path, transcript: str) -> Path:
    path = transcript_path(video_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(transcript, encoding="utf-8")
    return path


def read_embedding(video_path: str | Path) -> list[float] | None:
    """Return the stored embedding, or None when there is no sidecar."""
    path = embedding_path(video_path)
    if not path.is_file():
        return None
    return deserialize_binary(path.read_bytes())


def write_embedding(
    video_path: str | Path,
    embedding: Sequence[float] | None,
) -> None:
    """Write the embedding sidecar; None or an empty vector removes it."""
    if embedding is None or len(embedding) == 0:
        delete_embedding(video_path)
        return
    path = embedding_path(video_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(serialize_binary(embedding))


def delete_embedding(video_path: str | Path) -> None:
    _remove_quietly(embedding_path(video_path))


def write_deletion_marker(video_path: str | Path, snapshot: dict[str, Any]) -> Path:
    path = deletion_marker_path(video_path)
    path.write_text(json.dumps(snapshot, indent=2, default=str), encoding="utf-8")
    return path


def delete_deletion_marker(video_path: str | Path) -> None:
    _remove_quietly(deletion_marker_path(video_path))


def sidecar_paths(video_path: str | Path) -> list[Path]:
    """Every sidecar that may exist for ``video_path``."""
    return [
        transcript_path(video_path),
        embedding_path(video_path),
        deletion_marker_path(video_path),
    ]


def move_sidecars(old_video_path: str | Path, new_video_path: str | Path) -> None:
    """Move sidecars along with a renamed media file.

    Failures are logged and skipped; a sidecar left behind only costs a
    regeneration.
    """
    for source, target in zip(
        sidecar_paths(old_video_path), sidecar_paths(new_video_path), strict=True
    ):
        if not source.exists() or target.exists():
            continue
        try:
            source.rename(target)
        except OSError as e:
            logger.warning(
                "Failed to move sidecar",
                extra={"source": str(source), "target": str(target), "error": str(e)},
            )


def delete_media_and_sidecars(video_path: str | Path) -> None:
    for path in (Path(video_path), *sidecar_paths(video_path)):
        _remove_quietly(path)


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(
            "Failed to delete file",
            extra={"path": str(path), "error": str(e)},
        )
