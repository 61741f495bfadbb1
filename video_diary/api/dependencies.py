"""FastAPI dependency injection for services and settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from video_diary.application.services import (
    DescriptionEmbeddingGenerator,
    DiaryEntryService,
    EntryProcessingQueue,
    EntryProcessingWorker,
    InMemorySearchIndex,
    SummaryGenerator,
    TagSuggestionGenerator,
    TitleGenerator,
    TranscriptGenerator,
)
from video_diary.commons.settings.loader import get_settings as _load_settings
from video_diary.commons.settings.models import Settings
from video_diary.domain.value_objects import DEFAULT_SEGMENT
from video_diary.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)
from video_diary.infrastructure.storage import ChunkedUploadStore, FileSystemEntryStore


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Application settings loaded from config files and environment.
    """
    return _load_settings()


@dataclass
class ServiceContainer:
    """Long-lived services shared by every request."""

    factory: InfrastructureFactory
    store: FileSystemEntryStore
    uploads: ChunkedUploadStore
    search_index: InMemorySearchIndex
    queue: EntryProcessingQueue
    worker: EntryProcessingWorker
    entries: DiaryEntryService


class _ServicesHolder:
    """Holder for the service container to avoid global statements."""

    instance: ServiceContainer | None = None


def build_services(settings: Settings) -> ServiceContainer:
    """Wire stores, generators, the index and the worker from settings.

    Args:
        settings: Application settings.

    Returns:
        The assembled container; the worker is not started.
    """
    factory = get_factory(settings)
    llm = factory.get_llm_service()

    embedder = DescriptionEmbeddingGenerator(factory.get_text_embedding_service())
    store = factory.get_entry_store(
        embed_description=embedder if embedder.is_available else None
    )
    uploads = factory.get_upload_store()
    search_index = InMemorySearchIndex(store, embedder, settings.semantic_search)
    queue = EntryProcessingQueue()

    worker = EntryProcessingWorker(
        queue=queue,
        store=store,
        search_index=search_index,
        transcripts=TranscriptGenerator(
            factory.get_transcription_service(), store, settings.transcription
        ),
        summaries=SummaryGenerator(llm, settings.summaries, settings.llm.temperature),
        titles=TitleGenerator(llm, settings.titles, settings.llm.temperature),
        tag_suggestions=TagSuggestionGenerator(llm, settings.tag_suggestions),
    )

    return ServiceContainer(
        factory=factory,
        store=store,
        uploads=uploads,
        search_index=search_index,
        queue=queue,
        worker=worker,
        entries=DiaryEntryService(store, uploads, search_index, queue),
    )


def get_services() -> ServiceContainer:
    """Get the service container.

    Raises:
        RuntimeError: If services were not initialized at startup.
    """
    if _ServicesHolder.instance is None:
        raise RuntimeError("Services are not initialized")
    return _ServicesHolder.instance


def get_entry_service(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> DiaryEntryService:
    return services.entries


def get_entry_store(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> FileSystemEntryStore:
    return services.store


def get_upload_store(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> ChunkedUploadStore:
    return services.uploads


def get_search_index(
    services: Annotated[ServiceContainer, Depends(get_services)],
) -> InMemorySearchIndex:
    return services.search_index


def get_segment(request: Request) -> str:
    """Segment resolved for this request by the logging middleware."""
    return getattr(request.state, "segment", DEFAULT_SEGMENT)


# Type aliases for cleaner route signatures
SettingsDep = Annotated[Settings, Depends(get_settings)]
ServicesDep = Annotated[ServiceContainer, Depends(get_services)]
EntryServiceDep = Annotated[DiaryEntryService, Depends(get_entry_service)]
EntryStoreDep = Annotated[FileSystemEntryStore, Depends(get_entry_store)]
UploadStoreDep = Annotated[ChunkedUploadStore, Depends(get_upload_store)]
SearchIndexDep = Annotated[InMemorySearchIndex, Depends(get_search_index)]
SegmentDep = Annotated[str, Depends(get_segment)]


async def init_services(settings: Settings) -> ServiceContainer:
    """Initialize all services and start the processing worker.

    Args:
        settings: Application settings.
    """
    services = build_services(settings)
    _ServicesHolder.instance = services
    await services.worker.start()
    return services


async def shutdown_services() -> None:
    """Stop the worker and release provider clients."""
    services = _ServicesHolder.instance
    try:
        if services is not None:
            await services.worker.stop()
            await services.factory.close_all()
    finally:
        _ServicesHolder.instance = None
        reset_factory()
        get_settings.cache_clear()
