"""Asynchronous entry enrichment."""

from video_diary.application.services.processing.queue import EntryProcessingQueue
from video_diary.application.services.processing.worker import EntryProcessingWorker

__all__ = [
    "EntryProcessingQueue",
    "EntryProcessingWorker",
]
