"""Unit tests for QueryClassifier."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from services.query_classifier import QueryClassifier


@pytest.fixture
def classifier():
    return QueryClassifier()


class TestClassify:
    """Topical classification."""

    @pytest.mark.parametrize("utterance,expected", [
        ("When is the reunion?", QueryClassifier.DATE),
        ("Which hotel should I book?", QueryClassifier.HOTEL),
        ("Who is performing on Saturday?", QueryClassifier.ENTERTAINMENT),
        ("Is there golf this year?", QueryClassifier.ACTIVITY),
        ("How much does it cost?", QueryClassifier.REGISTRATION),
        ("Where is the venue?", QueryClassifier.LOCATION),
        ("How do I contact the organizers?", QueryClassifier.CONTACT),
    ])
    def test_categories(self, classifier, utterance, expected):
        assert classifier.classify(utterance) == expected

    def test_first_matching_category_wins(self, classifier):
        # Mentions both a hotel and a date trigger
        assert classifier.classify("When does the hotel block close?") == QueryClassifier.HOTEL

    def test_unclassified(self, classifier):
        assert classifier.classify("Tell me something nice") is None
        assert classifier.classify("") is None
        assert classifier.classify(None) is None

    def test_matches_whole_words_only(self, classifier):
        assert classifier.classify("Whenever you like") is None

    def test_multi_word_trigger(self, classifier):
        assert classifier.classify("Can I sign up online?") == QueryClassifier.REGISTRATION

    def test_deterministic(self, classifier):
        results = {classifier.classify("Where do I park?") for _ in range(5)}
        assert results == {QueryClassifier.LOCATION}


class TestConversationalTriggers:
    """Greeting, thanks, cost and solo detection."""

    def test_greeting(self, classifier):
        assert classifier.is_greeting("Hello there")
        assert classifier.is_greeting("good morning!")
        assert not classifier.is_greeting("this is shipping")

    def test_thanks(self, classifier):
        assert classifier.is_thanks("Thanks so much!")
        assert classifier.is_thanks("thank you")
        assert not classifier.is_thanks("Where is the venue?")

    def test_cost(self, classifier):
        assert classifier.mentions_cost("How much does it cost?")
        assert classifier.mentions_cost("I can't afford it")
        assert not classifier.mentions_cost("When is the reunion?")

    def test_solo_with_curly_apostrophe(self, classifier):
        assert classifier.mentions_solo("I don’t know anyone in my class")
        assert classifier.mentions_solo("I'm coming solo")
        assert not classifier.mentions_solo("My wife is coming too")


class TestCorroboration:
    """Chunk-side category evidence and markers."""

    def test_date_pattern(self, classifier):
        assert classifier.corroborates(QueryClassifier.DATE, "The reunion is May 21-24, 2026.")
        assert not classifier.corroborates(QueryClassifier.DATE, "Rooms are held at the Marriott.")

    def test_hotel_pattern(self, classifier):
        assert classifier.corroborates(QueryClassifier.HOTEL, "Rooms are held at the Marriott.")

    def test_tagged_trigger_keyword(self, classifier):
        assert classifier.corroborates(QueryClassifier.HOTEL, "Golf outing on Friday", ["golf", "stay"])
        assert classifier.corroborates(QueryClassifier.REGISTRATION, "The tent is on Poe Field", ["much"])
        assert not classifier.corroborates(QueryClassifier.HOTEL, "Golf outing on Friday", ["golf"])

    def test_no_category(self, classifier):
        assert not classifier.corroborates(None, "anything")

    def test_markers(self, classifier):
        assert classifier.marker_for(QueryClassifier.DATE) == "🗓️"
        assert classifier.marker_for(QueryClassifier.LOCATION) == "📍"
        assert classifier.marker_for(None) == ""
