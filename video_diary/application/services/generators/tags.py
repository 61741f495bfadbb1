"""Tag suggestion restricted to a user's favorite tags."""

import json
import re
from collections.abc import Sequence

from video_diary.application.services.generators.base import ChatGenerator
from video_diary.commons.settings.models import TagSuggestionSettings
from video_diary.domain.models import normalize_tags
from video_diary.infrastructure.llm.base import LLMServiceBase, Message

DEFAULT_TAG_PROMPT = """\
You are an AI assistant that analyzes diary video descriptions and selects the \
most relevant tags from a provided list.
Only return tags that exist in the provided list.
Respond strictly with JSON shaped as {"selectedTags":["tag-one","tag-two"]}. \
Return an empty array if nothing applies."""

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def filter_to_favorites(
    candidates: Sequence[object],
    favorite_tags: Sequence[str],
) -> list[str]:
    """Keep candidates that match a favorite, using the favorite's spelling."""
    canonical = {tag.casefold(): tag for tag in normalize_tags(favorite_tags)}
    selected = []
    for candidate in candidates:
        if not isinstance(candidate, str):
            continue
        match = canonical.get(candidate.strip().casefold())
        if match:
            selected.append(match)
    return normalize_tags(selected)


class TagSuggestionGenerator(ChatGenerator):
    """Picks favorite tags that fit an entry's description."""

    trace_name = "tag_suggestions"

    def __init__(
        self,
        llm_service: LLMServiceBase | None,
        settings: TagSuggestionSettings,
    ) -> None:
        super().__init__(
            llm_service,
            enabled=settings.enabled,
            max_tokens=settings.max_tokens,
            temperature=0.0,
        )
        self._system_prompt = settings.system_prompt or DEFAULT_TAG_PROMPT

    async def suggest_tags(
        self,
        description: str | None,
        favorite_tags: Sequence[str],
        existing_tags: Sequence[str] = (),
    ) -> list[str]:
        """Select favorite tags relevant to a description.

        Args:
            description: Entry description.
            favorite_tags: The only tags that may be returned.
            existing_tags: Tags already on the entry, given as context.

        Returns:
            Selected tags in their favorite spelling; empty when unavailable.
        """
        if not self.is_available or not description or not description.strip():
            return []
        if not favorite_tags:
            return []

        payload = json.dumps(
            {
                "description": description.strip(),
                "favoriteTags": list(favorite_tags),
                "existingTags": list(existing_tags),
            },
            ensure_ascii=False,
        )
        reply = await self._complete(
            [Message.system(self._system_prompt), Message.user(payload)],
            json_mode=True,
        )
        if not reply:
            return []
        return filter_to_favorites(self._parse_selected(reply), favorite_tags)

    def _parse_selected(self, reply: str) -> list[object]:
        match = _JSON_OBJECT.search(reply)
        if match is None:
            self._logger.warning("Tag response was not JSON", extra={"reply": reply[:200]})
            return []
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            self._logger.warning(
                "Failed to parse tag response",
                extra={"error": str(e)},
            )
            return []

        selected = data.get("selectedTags") if isinstance(data, dict) else None
        if not isinstance(selected, list):
            self._logger.warning("Tag response did not include a 'selectedTags' array")
            return []
        return selected
