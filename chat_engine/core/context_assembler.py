"""
Context assembly.

Turns ranked search results and recent conversation history into the
bounded payload handed to the language-model client:
- the top max_context_items results, projected to ChatContext
- history capped to history_limit, most recent kept, oldest first
- a rendered text block grouping general information and projects
- the single project the turn is most likely about, for the client to feature

Assembly is pure and deterministic: the same results, history and config
always produce the same payload.

Dependencies: chat_engine.models, chat_engine.boundary.vdb, chat_engine.core.query_intent
System role: Context window construction
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from chat_engine.boundary.vdb.search_schemas import SearchResult
from chat_engine.core.query_intent import QueryIntent
from chat_engine.models.chat import ChatContext, ChatSystemConfig


class HistoryMessage(Protocol):
    """Anything with a role and content (ORM rows, test doubles)."""

    role: str
    content: str


@dataclass(frozen=True)
class AssembledContext:
    """Bounded context for one turn."""

    context: list[ChatContext] = field(default_factory=list)
    history: list[Any] = field(default_factory=list)
    formatted_context: str = ""


def project_result(result: SearchResult, show_search_metrics: bool) -> ChatContext:
    """Project a SearchResult onto ChatContext, hiding internals unless asked."""
    if show_search_metrics:
        return ChatContext(
            content_id=result.content_id,
            content_type=result.content_type,
            similarity=result.similarity,
            content=result.content,
            content_summary=result.content_summary,
            metadata=result.metadata,
            match_type=result.match_type,
        )
    return ChatContext(
        content_id=result.content_id,
        content_type=result.content_type,
        similarity=result.similarity,
        content=result.content,
    )


# Project confidence needed to feature a project on a non-project query
FEATURED_PROJECT_SIMILARITY = 0.85
HIGH_CONFIDENCE_PROJECT_SIMILARITY = 0.8


def find_relevant_project(
    results: Sequence[SearchResult],
    intent: QueryIntent | None,
) -> dict[str, Any] | None:
    """
    Pick the project a turn is about.

    Nothing is picked for a general question unless some project scored
    above FEATURED_PROJECT_SIMILARITY. Otherwise the choice is a direct
    title match, then the first project above
    HIGH_CONFIDENCE_PROJECT_SIMILARITY, then the first project at all.

    Args:
        results: Ranked search results
        intent: Query intent of the turn

    Returns:
        dict | None: Copy of the project's content with ``name`` filled from
        its title, or None
    """
    projects = [r for r in results if r.content_type == "project"]
    if not projects:
        return None
    is_project_query = intent is not None and intent.is_project_query
    if not is_project_query and not any(r.similarity > FEATURED_PROJECT_SIMILARITY for r in projects):
        return None

    chosen = next((r for r in projects if r.match_type == "direct_project_match"), None)
    if chosen is None:
        chosen = next(
            (r for r in projects if r.similarity > HIGH_CONFIDENCE_PROJECT_SIMILARITY),
            projects[0],
        )

    project = dict(chosen.content)
    if not project.get("name"):
        project["name"] = chosen.title
    if not project.get("id") and project.get("slug") and chosen.metadata.get("id"):
        project["id"] = chosen.metadata["id"]
    return project


def trim_history(history: Sequence[HistoryMessage], limit: int) -> list[HistoryMessage]:
    """
    Keep the most recent ``limit`` messages in chronological order.

    Args:
        history: Messages ordered oldest to newest
        limit: Maximum messages kept

    Returns:
        list: The newest ``limit`` messages, oldest first
    """
    if limit <= 0:
        return []
    return list(history[-limit:])


def format_context(results: Sequence[SearchResult]) -> str:
    """
    Render results as the text block injected into the generator prompt.

    General information entries come first, then projects, each headed by
    its title and match percentage. Other content types follow under their
    own upper-cased heading.

    Args:
        results: Ranked results already selected for the context

    Returns:
        str: Rendered context, empty when there are no results
    """
    if not results:
        return ""

    sections: dict[str, list[SearchResult]] = {}
    for result in results:
        sections.setdefault(result.content_type, []).append(result)

    parts: list[str] = []

    general = sections.pop("general_info", [])
    if general:
        parts.append("GENERAL INFORMATION:\n")
        for result in general:
            body = result.content.get("content") or result.content_summary or ""
            parts.append(f"[{result.title} - Match: {result.similarity * 100:.1f}%]\n{body}\n\n")

    projects = sections.pop("project", [])
    if projects:
        parts.append("PROJECTS:\n")
        for result in projects:
            parts.append(_format_project(result))

    for content_type, extra in sections.items():
        parts.append(f"{content_type.upper().replace('_', ' ')}:\n")
        for result in extra:
            body = result.content.get("content") or result.content_summary or ""
            parts.append(f"[{result.title} - Match: {result.similarity * 100:.1f}%]\n{body}\n\n")

    return "".join(parts).strip()


def _format_project(result: SearchResult) -> str:
    content = result.content
    lines = [f"[{result.title} - Match: {result.similarity * 100:.1f}%]\n"]
    lines.append(f"{content.get('summary') or result.content_summary or ''}\n")

    features = content.get("features")
    if isinstance(features, list) and features:
        lines.append("\nKey Features:\n")
        lines.extend(f"- {feature}\n" for feature in features)

    if content.get("url"):
        lines.append(f"\nProject URL: {content['url']}\n")

    lines.append("\n")
    return "".join(lines)


class ContextAssembler:
    """Builds the bounded context for a turn."""

    def assemble(
        self,
        results: Sequence[SearchResult],
        history: Sequence[HistoryMessage],
        config: ChatSystemConfig,
    ) -> AssembledContext:
        """
        Assemble context items and trimmed history.

        Args:
            results: Ranked search results
            history: Prior messages, oldest first
            config: Per-call configuration

        Returns:
            AssembledContext: Context items, trimmed history and rendered text
        """
        selected = list(results[:config.max_context_items])
        return AssembledContext(
            context=[project_result(r, config.show_search_metrics) for r in selected],
            history=trim_history(history, config.history_limit),
            formatted_context=format_context(selected),
        )
