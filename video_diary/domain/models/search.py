"""Search query and result models."""

from datetime import datetime

from pydantic import BaseModel, Field

KEYWORD_SCORE = 1.0


class SearchQuery(BaseModel):
    """A hybrid search request.

    ``vector_query`` is embedded and compared against description
    embeddings; ``keyword`` is matched as a substring. Either may be empty.
    """

    keyword: str | None = Field(default=None, description="Substring to match")
    vector_query: str | None = Field(
        default=None,
        description="Natural language text for semantic matching",
    )

    @property
    def keyword_text(self) -> str | None:
        """Text used for keyword matching.

        Falls back to the semantic query text when no keyword was given.
        """
        for candidate in (self.keyword, self.vector_query):
            if candidate and candidate.strip():
                return candidate.strip()
        return None

    @property
    def semantic_text(self) -> str | None:
        text = (self.vector_query or "").strip()
        return text or None


class SearchResult(BaseModel):
    """A ranked search hit."""

    id: str
    title: str
    description: str | None = None
    score: float = Field(description="Cosine similarity, or 1.0 for keyword hits")
    created_at: datetime
