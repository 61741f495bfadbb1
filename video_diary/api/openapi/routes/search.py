"""Search endpoint."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from video_diary.api.dependencies import SearchIndexDep, SegmentDep
from video_diary.domain.models import SearchQuery, SearchResult

router = APIRouter()


class SearchResponse(BaseModel):
    """Search results, best match first."""

    results: list[SearchResult] = Field(default_factory=list)
    semantic: bool = Field(
        description="Whether semantic search was available for this query",
    )


@router.post(
    "/search",
    response_model=SearchResponse,
    summary="Search entries",
    description=(
        "Semantic search over descriptions when `vector_query` is given and "
        "embeddings are configured, otherwise substring search over title, "
        "description and transcript."
    ),
)
async def search_entries(
    query: SearchQuery,
    index: SearchIndexDep,
    segment: SegmentDep,
) -> SearchResponse:
    """Search the caller's entries."""
    results = await index.search(query, segment=segment)
    return SearchResponse(results=results, semantic=index.semantic_enabled)
