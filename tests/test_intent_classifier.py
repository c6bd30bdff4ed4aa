"""
Tests for the phrase-matching intent classifier.
"""

import pytest
from pydantic import ValidationError

from hirelytics_interview.agents.intent_classifier import (
    DEFAULT_PHRASES,
    IntentClassifier,
    PhraseLists,
)


class TestIntentClassifier:
    """Tests for IntentClassifier."""

    @pytest.fixture
    def classifier(self) -> IntentClassifier:
        return IntentClassifier()

    def test_clarification_request(self, classifier: IntentClassifier) -> None:
        result = classifier.classify("can you repeat that?")

        assert result.is_clarification
        assert not result.is_final_questions_request

    def test_matching_is_case_insensitive(self, classifier: IntentClassifier) -> None:
        assert classifier.classify("Sorry, I DIDN'T UNDERSTAND the question").is_clarification
        assert classifier.classify("Could you REPHRASE it?").is_clarification

    def test_final_questions_request(self, classifier: IntentClassifier) -> None:
        result = classifier.classify("Actually, I have questions for you about the team")

        assert result.is_final_questions_request
        assert not result.is_clarification

    def test_both_labels_can_match(self, classifier: IntentClassifier) -> None:
        result = classifier.classify("Could you repeat that? Also I have questions")

        assert result.is_clarification
        assert result.is_final_questions_request

    def test_plain_answer_matches_neither(self, classifier: IntentClassifier) -> None:
        result = classifier.classify("I led the migration of our billing service to Kubernetes.")

        assert not result.is_clarification
        assert not result.is_final_questions_request

    @pytest.mark.parametrize("utterance", ["", "   ", None, 42])
    def test_empty_or_garbage_input(self, classifier: IntentClassifier, utterance: object) -> None:
        result = classifier.classify(utterance)  # type: ignore[arg-type]

        assert not result.is_clarification
        assert not result.is_final_questions_request

    def test_no_more_questions(self, classifier: IntentClassifier) -> None:
        assert classifier.indicates_no_more_questions("No, I don't have any questions")
        assert classifier.indicates_no_more_questions("I don't have anything else")
        assert not classifier.indicates_no_more_questions("Yes, what does the team work on?")
        assert not classifier.indicates_no_more_questions("")

    def test_injected_phrase_lists(self) -> None:
        phrases = PhraseLists(
            clarification=("wie bitte",),
            final_questions=("ich habe fragen",),
            no_more_questions=("keine fragen",),
        )
        classifier = IntentClassifier(phrases=phrases)

        assert classifier.phrases is phrases
        assert classifier.classify("Wie bitte?").is_clarification
        assert classifier.classify("Ich habe Fragen").is_final_questions_request
        assert not classifier.classify("can you repeat that?").is_clarification
        assert classifier.indicates_no_more_questions("Keine Fragen, danke")

    def test_default_phrases_are_immutable(self) -> None:
        with pytest.raises(ValidationError):
            DEFAULT_PHRASES.clarification = ("changed",)  # type: ignore[misc]
