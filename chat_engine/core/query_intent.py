"""
Query intent detection.

Classifies a visitor question as either about one specific project or
about the portfolio owner in general. A confidently named project is
looked up by title before the hybrid search runs, and the result is
recorded with the turn's analytics.

Dependencies: re (stdlib)
System role: Lightweight query classification
"""

import re
from dataclasses import asdict, dataclass
from typing import Any

_GENERAL_PATTERNS = [
    r"what (tech(nical)?|programming|coding|development) (skills|technologies|tools|stack|languages)",
    r"what (is|are) (your|{owner}) (tech(nical)?|programming|coding|development) "
    r"(skills|technologies|tools|stack|languages)",
    r"tell me about (your|{owner}) (skills|background|experience|education|design approach|approach)",
    r"what (is|are) (your|{owner}) (background|experience|education|design approach|approach)",
    r"portfolio|resume|\bcv\b|qualifications|expertise|proficiency",
    r"(who is|about) {owner}",
]

_PROJECT_PATTERNS = [
    re.compile(r"tell me about (the )?([a-z0-9\s\-]+) project"),
    re.compile(r"what (is|was) (the )?([a-z0-9\s\-]+) project"),
    re.compile(r"explain (the )?([a-z0-9\s\-]+) project"),
    re.compile(r"describe (the )?([a-z0-9\s\-]+) project"),
    re.compile(r"information (about|on) (the )?([a-z0-9\s\-]+) project"),
    re.compile(r"tell me about ([a-z0-9\s\-]+)"),
]

_NOT_A_PROJECT = {"you", "your", "yourself", "skills", "experience", "background", "me"}
_NAME_ONLY_BLOCKERS = ("skill", "experience", "you", "about")

# Below this, a detected name only biases the reply, it is not looked up
DIRECT_LOOKUP_CONFIDENCE = 0.7


@dataclass(frozen=True)
class QueryIntent:
    """Outcome of intent analysis."""

    is_project_query: bool
    project_name: str | None = None
    confidence: float = 0.0
    pattern: str | None = None

    @property
    def lookup_name(self) -> str | None:
        """Project name confident enough for a direct title lookup."""
        if self.is_project_query and self.project_name and self.confidence > DIRECT_LOOKUP_CONFIDENCE:
            return self.project_name
        return None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _general_patterns(owner_name: str | None) -> list[re.Pattern]:
    owner = re.escape(owner_name.lower()) + r"('?s)?" if owner_name else r"(?!x)x"
    return [re.compile(p.replace("{owner}", owner)) for p in _GENERAL_PATTERNS]


def analyze_query_intent(query: str, owner_name: str | None = None) -> QueryIntent:
    """
    Detect whether a query asks about a specific project.

    General-information patterns are checked first. Then explicit project
    phrasings ("tell me about the X project"). Finally a short query with no
    personal words is treated as a bare project name.

    Args:
        query: Visitor question
        owner_name: Portfolio owner's name, matched like "your"

    Returns:
        QueryIntent: Classification with confidence
    """
    clean = query.lower().strip()
    blocked_names = set(_NOT_A_PROJECT)
    if owner_name:
        blocked_names.add(owner_name.lower())

    for pattern in _general_patterns(owner_name):
        if pattern.search(clean):
            return QueryIntent(is_project_query=False, confidence=0.9, pattern="general_info")

    for pattern in _PROJECT_PATTERNS:
        match = pattern.search(clean)
        if match:
            project_name = match.group(match.lastindex).strip()
            if project_name in blocked_names:
                return QueryIntent(is_project_query=False, pattern="false_positive")
            return QueryIntent(
                is_project_query=True,
                project_name=project_name,
                confidence=1.0,
                pattern="direct_match",
            )

    blockers = _NAME_ONLY_BLOCKERS + ((owner_name.lower(),) if owner_name else ())
    if len(clean) > 3 and len(clean.split()) < 4 and not any(b in clean for b in blockers):
        return QueryIntent(
            is_project_query=True,
            project_name=clean,
            confidence=0.8,
            pattern="name_only",
        )

    return QueryIntent(is_project_query=False)
