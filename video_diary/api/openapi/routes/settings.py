"""User preference endpoints."""

from fastapi import APIRouter

from video_diary.api.dependencies import EntryStoreDep, SegmentDep
from video_diary.domain.models import UserPreferences

router = APIRouter()


@router.get(
    "/settings/preferences",
    response_model=UserPreferences,
    summary="Get preferences",
)
async def get_preferences(
    store: EntryStoreDep,
    segment: SegmentDep,
) -> UserPreferences:
    """Get the caller's recording and enrichment preferences."""
    return await store.get_preferences(segment=segment)


@router.put(
    "/settings/preferences",
    response_model=UserPreferences,
    summary="Update preferences",
    description="Replace preferences. Favorite tags are deduplicated case-insensitively.",
)
async def update_preferences(
    body: UserPreferences,
    store: EntryStoreDep,
    segment: SegmentDep,
) -> UserPreferences:
    """Replace the caller's preferences."""
    return await store.update_preferences(body, segment=segment)
