"""
Search schemas.

Pydantic models for corpus search results and the outcome of one hybrid
search call.

Dependencies: pydantic
System role: Type definitions for retrieval
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MatchType = Literal["vector", "lexical", "direct_project_match"]


class SearchResult(BaseModel):
    """
    Single scored corpus item.

    Identity within one search is (content_id, content_type). match_type and
    corpus_position are internal: they record which strategy produced the
    score and where the item sits in the corpus for tie-breaking. A
    ``direct_project_match`` comes from a title lookup of a project the
    visitor named explicitly.
    """

    model_config = ConfigDict(frozen=True)

    content_id: str = Field(description="Source item identifier")
    content_type: str = Field(description="Corpus content type")
    similarity: float = Field(ge=0.0, le=1.0, description="Similarity score (0.0-1.0)")
    content: dict[str, Any] = Field(default_factory=dict, description="Retrieved payload")
    content_summary: str | None = Field(default=None, description="Optional short summary")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Item metadata")
    match_type: MatchType = Field(description="Strategy that produced the score")
    corpus_position: int = Field(ge=0, description="Corpus insertion order")

    @property
    def key(self) -> tuple[str, str]:
        """Deduplication key."""
        return (self.content_id, self.content_type)

    @property
    def title(self) -> str:
        """Best display title for the item."""
        return (
            self.metadata.get("title")
            or self.content.get("title")
            or self.content.get("name")
            or self.content_id
        )


class SearchOutcome(BaseModel):
    """Ranked results of one search plus the degraded-mode flag."""

    results: list[SearchResult] = Field(default_factory=list)
    degraded: bool = Field(default=False, description="Vector strategy failed, lexical only")
    vector_error: str | None = Field(default=None, description="Why the vector strategy failed")
    strategies: list[MatchType] = Field(default_factory=list, description="Strategies that ran")
