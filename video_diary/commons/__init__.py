"""Commons package - shared utilities and base classes."""

from video_diary.commons.locks import KeyedLock

__all__ = [
    "KeyedLock",
]
