"""
Intent classifier agent.

Labels a candidate utterance as a clarification request and/or a request to
ask the interviewer questions. Classification is a case-insensitive phrase
match against configurable phrase lists, which keeps it deterministic and
tolerant of speech-recognition noise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class PhraseLists(BaseModel):
    """Immutable phrase configuration for the classifier."""

    model_config = ConfigDict(frozen=True)

    clarification: tuple[str, ...] = Field(
        ...,
        description="Phrases indicating the candidate wants the question repeated or rephrased",
    )
    final_questions: tuple[str, ...] = Field(
        ...,
        description="Phrases indicating the candidate wants to ask their own questions",
    )
    no_more_questions: tuple[str, ...] = Field(
        ...,
        description="Phrases indicating the candidate has no further questions",
    )


DEFAULT_PHRASES = PhraseLists(
    clarification=(
        "repeat",
        "say again",
        "say that again",
        "explain again",
        "clarify",
        "don't understand",
        "didn't understand",
        "not clear",
        "unclear",
        "what do you mean",
        "once more",
        "one more time",
        "didn't hear",
        "didn't catch",
        "come again",
        "pardon me",
        "could you explain",
        "i'm confused",
        "i am confused",
        "not sure i understand",
        "rephrase",
        "what was the question",
        "what did you ask",
        "ask again",
    ),
    final_questions=(
        "any questions",
        "do you have questions",
        "questions for me",
        "questions about",
        "want to ask",
        "i have questions",
        "i have a question",
        "can i ask",
        "final questions",
        "my questions",
        "questions for you",
        "ask you something",
        "few questions",
    ),
    no_more_questions=(
        "no",
        "don't have",
        "no questions",
    ),
)


class IntentClassification(BaseModel):
    """Result of intent classification."""

    is_clarification: bool = Field(default=False, description="Candidate asked for a repeat/rephrase")
    is_final_questions_request: bool = Field(
        default=False,
        description="Candidate wants to ask the interviewer questions",
    )


class IntentClassifierBase(ABC):
    """Abstract base class for intent classifiers."""

    @abstractmethod
    def classify(self, utterance: str) -> IntentClassification:
        """
        Classify a candidate utterance.

        Args:
            utterance: Candidate's raw utterance.

        Returns:
            Classification result.
        """
        ...


class IntentClassifier(IntentClassifierBase):
    """Phrase-matching intent classifier."""

    def __init__(self, phrases: PhraseLists | None = None) -> None:
        """
        Initialize the intent classifier.

        Args:
            phrases: Phrase configuration. Uses DEFAULT_PHRASES if None.
        """
        self._phrases = phrases or DEFAULT_PHRASES

    @property
    def phrases(self) -> PhraseLists:
        """Get the phrase configuration."""
        return self._phrases

    @staticmethod
    def _normalize(utterance: object) -> str:
        if not isinstance(utterance, str):
            return ""
        return utterance.lower().strip()

    @staticmethod
    def _contains_any(text: str, phrases: tuple[str, ...]) -> bool:
        return bool(text) and any(phrase in text for phrase in phrases)

    def classify(self, utterance: str) -> IntentClassification:
        """
        Classify a candidate utterance.

        Both labels are matched independently, so an utterance can carry
        either, both or neither. Never raises.

        Args:
            utterance: Candidate's raw utterance.

        Returns:
            Classification result.
        """
        text = self._normalize(utterance)
        result = IntentClassification(
            is_clarification=self._contains_any(text, self._phrases.clarification),
            is_final_questions_request=self._contains_any(text, self._phrases.final_questions),
        )
        logger.debug(
            f"Classified utterance: clarification={result.is_clarification} "
            f"final_questions={result.is_final_questions_request}"
        )
        return result

    def indicates_no_more_questions(self, utterance: str) -> bool:
        """
        Check whether the candidate signals they have no further questions.

        Args:
            utterance: Candidate's raw utterance.

        Returns:
            True if any "no more questions" phrase occurs in the utterance.
        """
        return self._contains_any(self._normalize(utterance), self._phrases.no_more_questions)
