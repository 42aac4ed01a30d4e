"""
Test suite for query intent detection.

System role: Verification of lightweight query classification
"""

import pytest

from chat_engine.core.query_intent import QueryIntent, analyze_query_intent


class TestGeneralQueries:
    """Test suite for questions about the owner rather than a project."""

    @pytest.mark.parametrize(
        "query",
        [
            "What tech skills do you have?",
            "What are your programming languages?",
            "Tell me about your background",
            "Can I see your resume?",
        ],
    )
    def test_general_questions_should_not_be_project_queries(self, query: str) -> None:
        """Test skills/background phrasings are classified as general info."""
        # Act
        intent = analyze_query_intent(query)

        # Assert
        assert intent.is_project_query is False
        assert intent.pattern == "general_info"

    def test_owner_name_should_count_as_general(self) -> None:
        """Test questions naming the owner are general info."""
        # Act
        intent = analyze_query_intent("Who is Alex?", owner_name="Alex")

        # Assert
        assert intent.is_project_query is False
        assert intent.pattern == "general_info"


class TestProjectQueries:
    """Test suite for questions about a specific project."""

    def test_explicit_project_phrase_should_extract_name(self) -> None:
        """Test 'tell me about the X project' extracts X."""
        # Act
        intent = analyze_query_intent("Tell me about the weather dashboard project")

        # Assert
        assert intent.is_project_query is True
        assert intent.project_name == "weather dashboard"
        assert intent.confidence == 1.0
        assert intent.pattern == "direct_match"

    def test_describe_phrase_should_extract_name(self) -> None:
        """Test 'describe X project' without the article."""
        # Act
        intent = analyze_query_intent("describe chatbot project")

        # Assert
        assert intent.project_name == "chatbot"

    def test_personal_word_should_be_false_positive(self) -> None:
        """Test 'tell me about yourself' is not a project."""
        # Act
        intent = analyze_query_intent("tell me about yourself")

        # Assert
        assert intent.is_project_query is False
        assert intent.pattern == "false_positive"

    def test_short_query_should_be_treated_as_project_name(self) -> None:
        """Test a bare short name is a likely project query."""
        # Act
        intent = analyze_query_intent("Weather Dashboard v2")

        # Assert
        assert intent == QueryIntent(
            is_project_query=True,
            project_name="weather dashboard v2",
            confidence=0.8,
            pattern="name_only",
        )

    def test_long_open_question_should_be_unclassified(self) -> None:
        """Test a long question without project phrasing is not a project query."""
        # Act
        intent = analyze_query_intent("How do you usually approach testing large systems?")

        # Assert
        assert intent.is_project_query is False
        assert intent.pattern is None

    def test_as_dict_should_be_json_ready(self) -> None:
        """Test as_dict returns plain values for analytics metadata."""
        # Act
        data = analyze_query_intent("describe chatbot project").as_dict()

        # Assert
        assert data == {
            "is_project_query": True,
            "project_name": "chatbot",
            "confidence": 1.0,
            "pattern": "direct_match",
        }


class TestLookupName:
    """Test suite for QueryIntent.lookup_name."""

    def test_confident_project_name_should_be_looked_up(self) -> None:
        """Test explicit and bare project names are both confident enough."""
        assert analyze_query_intent("Tell me about the weather dashboard project").lookup_name == "weather dashboard"
        assert analyze_query_intent("portfolio chatbot").lookup_name is None
        assert analyze_query_intent("weather dashboard").lookup_name == "weather dashboard"

    def test_low_confidence_name_should_not_be_looked_up(self) -> None:
        """Test a name at or below 0.7 confidence is not looked up."""
        intent = QueryIntent(is_project_query=True, project_name="chatbot", confidence=0.7)

        assert intent.lookup_name is None

    def test_general_query_should_have_no_lookup_name(self) -> None:
        assert analyze_query_intent("What are your technical skills?").lookup_name is None
