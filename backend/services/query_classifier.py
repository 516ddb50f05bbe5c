"""
Query classifier for the Reunion FAQ Assistant.

Maps an utterance to at most one topical category using fixed trigger-word
lists, and recognises the conversational triggers (greeting, thanks, cost,
travelling solo) that the response composer reacts to.
"""

import logging
import re
from typing import Dict, Iterable, Optional, Pattern

logger = logging.getLogger(__name__)


def _compile_phrases(phrases: Iterable[str]) -> Pattern:
    """Word-boundary regex over phrases, longest first so multi-word phrases win."""
    sorted_phrases = sorted(phrases, key=len, reverse=True)
    patterns_regex = '|'.join(re.escape(p) for p in sorted_phrases)
    return re.compile(rf'\b({patterns_regex})\b')


class QueryClassifier:
    """
    Deterministic keyword classifier shared by the relevance scorer and the response composer.

    Categories are checked in a fixed order and the first match wins, so an
    utterance is classified into zero or one category.
    """

    DATE = "date"
    HOTEL = "hotel"
    ENTERTAINMENT = "entertainment"
    ACTIVITY = "activity"
    REGISTRATION = "registration"
    LOCATION = "location"
    CONTACT = "contact"

    # Order matters: first matching category wins
    CATEGORY_TRIGGERS = {
        HOTEL: {
            "hotel", "hotels", "housing", "marriott", "room", "rooms", "block",
            "stay", "accommodation", "accommodations", "lodging", "dorm"
        },
        DATE: {
            "when", "date", "dates", "2026", "time", "what day"
        },
        ENTERTAINMENT: {
            "perform", "performing", "performer", "performance", "music", "stanley",
            "jordan", "jazz", "entertainment", "band", "bands", "concert"
        },
        ACTIVITY: {
            "golf", "dinner", "dance", "schedule", "events", "activities",
            "activity", "barbecue", "tour", "p-rade"
        },
        REGISTRATION: {
            "cost", "costs", "price", "fee", "fees", "register", "registration",
            "rsvp", "how much", "sign up"
        },
        LOCATION: {
            "where", "location", "place", "venue", "address", "directions"
        },
        CONTACT: {
            "contact", "email", "phone", "call", "reach"
        },
    }

    # Patterns a chunk must contain for a classified query to earn the category boost
    CORROBORATING_PATTERNS = {
        DATE: r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday|january|february|march|april|may|june|july|august|september|october|november|december|20\d\d)\b",
        HOTEL: r"\b(hotels?|housing|rooms?|accommodations?|lodging|marriott|dorms?|night|stay)\b",
        ENTERTAINMENT: r"\b(music|bands?|perform\w*|concert|entertainment|jazz|guitarist|show|fireworks)\b",
        ACTIVITY: r"\b(golf|dinner|dance|schedule|activit\w*|events?|barbecue|tour|breakfast|lunch|p-rade)\b",
        REGISTRATION: r"(\$\s?\d|\b(register\w*|registration|cost|fee|price|rsvp|early bird)\b)",
        LOCATION: r"\b(location|venue|address|resort|campus|located|drive|street|princeton)\b",
        CONTACT: r"(@|\b(email|phone|contact|call|reach)\b)",
    }

    CATEGORY_MARKERS = {
        DATE: "🗓️",
        HOTEL: "🏨",
        ENTERTAINMENT: "🎵",
        ACTIVITY: "🎯",
        REGISTRATION: "📝",
        LOCATION: "📍",
        CONTACT: "📧",
    }

    GREETING_PATTERNS = {"hello", "hi", "hey", "howdy", "greetings", "good morning", "good afternoon", "good evening"}
    THANKS_PATTERNS = {"thank", "thanks", "thank you", "thx", "appreciate it"}
    COST_PATTERNS = {
        "cost", "costs", "price", "expensive", "afford", "money", "fee", "fees",
        "how much", "pay", "budget"
    }
    SOLO_PATTERNS = {
        "alone", "solo", "don't know anyone", "dont know anyone", "lonely",
        "by myself", "on my own"
    }

    def __init__(self):
        """Compile trigger lists once."""
        self._category_regexes: Dict[str, Pattern] = {
            category: _compile_phrases(triggers)
            for category, triggers in self.CATEGORY_TRIGGERS.items()
        }
        self._corroborating_regexes: Dict[str, Pattern] = {
            category: re.compile(pattern)
            for category, pattern in self.CORROBORATING_PATTERNS.items()
        }
        self._trigger_words: Dict[str, frozenset] = {
            category: frozenset(word for phrase in triggers for word in phrase.split())
            for category, triggers in self.CATEGORY_TRIGGERS.items()
        }
        self._greeting_regex = _compile_phrases(self.GREETING_PATTERNS)
        self._thanks_regex = _compile_phrases(self.THANKS_PATTERNS)
        self._cost_regex = _compile_phrases(self.COST_PATTERNS)
        self._solo_regex = _compile_phrases(self.SOLO_PATTERNS)

    def classify(self, utterance: str) -> Optional[str]:
        """
        Classify an utterance into at most one topical category.

        Args:
            utterance: User message

        Returns:
            Category name, or None when no trigger list matches
        """
        if not utterance or not utterance.strip():
            return None

        lowered = self._normalize(utterance)
        for category, regex in self._category_regexes.items():
            if regex.search(lowered):
                logger.debug(f"Classified query as '{category}': {utterance[:50]}")
                return category
        return None

    def corroborates(self, category: Optional[str], text: str, keywords: Optional[Iterable[str]] = None) -> bool:
        """
        Check whether a chunk backs up a category.

        A chunk corroborates when its text matches the category's patterns or
        when one of its tagged keywords is a word of one of the category's triggers.

        Args:
            category: Classified query category, or None
            text: Chunk text (question, answer and category label)
            keywords: Tagged keywords of the chunk
        """
        if not category:
            return False

        trigger_words = self._trigger_words.get(category, frozenset())
        if any(keyword.lower() in trigger_words for keyword in keywords or []):
            return True

        regex = self._corroborating_regexes.get(category)
        return bool(text and regex and regex.search(text.lower()))

    def marker_for(self, category: Optional[str]) -> str:
        """Prefix marker for a category, empty when unclassified."""
        return self.CATEGORY_MARKERS.get(category, "") if category else ""

    def is_greeting(self, utterance: str) -> bool:
        return bool(self._greeting_regex.search(self._normalize(utterance)))

    def is_thanks(self, utterance: str) -> bool:
        return bool(self._thanks_regex.search(self._normalize(utterance)))

    def mentions_cost(self, utterance: str) -> bool:
        return bool(self._cost_regex.search(self._normalize(utterance)))

    def mentions_solo(self, utterance: str) -> bool:
        return bool(self._solo_regex.search(self._normalize(utterance)))

    @staticmethod
    def _normalize(utterance: str) -> str:
        # Curly apostrophes from mobile keyboards
        return (utterance or "").lower().replace("’", "'")
