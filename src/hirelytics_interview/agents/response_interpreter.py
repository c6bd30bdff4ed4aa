"""
Response interpreter agent.

Turns the interviewer model's free text into a structured feedback /
next-question pair. Parsing is two-staged: a strict JSON read of the first
balanced ``{...}`` block, then a sentence-splitting fallback. The result is
tagged with the stage that produced it; malformed output never raises.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Literal

from pydantic import BaseModel, Field

from hirelytics_interview.agents.intent_classifier import IntentClassification
from hirelytics_interview.orchestrator.schemas import InterviewPhase

logger = logging.getLogger(__name__)

DEFAULT_FEEDBACK = "Thank you for sharing that."

# Sentence boundaries: full stops and line breaks.
_SENTENCE_SPLIT = re.compile(r"\.+|\n+")

_ENDING_PHASES = (InterviewPhase.CLOSING, InterviewPhase.COMPLETED)


class ParsedResponse(BaseModel):
    """Fields read from a JSON object in the model output."""

    kind: Literal["parsed"] = "parsed"
    feedback: str = ""
    next_question: str = ""


class FallbackResponse(BaseModel):
    """Fields allocated heuristically from unstructured model output."""

    kind: Literal["fallback"] = "fallback"
    feedback: str = ""
    next_question: str = ""
    sentence_count: int = 0


class Interpretation(BaseModel):
    """Final interpreted reply."""

    feedback: str = Field(default="", description="Feedback on the candidate's response")
    next_question: str = Field(default="", description="What the interviewer says next")
    source: Literal["parsed", "fallback", "closing", "generation_failure"] = "parsed"


def extract_json_block(text: str) -> str | None:
    """
    Find the first balanced ``{...}`` block in text.

    Braces inside JSON string literals are ignored.

    Args:
        text: Raw model output.

    Returns:
        The block, or None if there is no balanced object.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        start = text.find("{", start + 1)
    return None


def split_sentences(text: str) -> list[str]:
    """Split text into non-empty, stripped sentences."""
    return [part.strip() for part in _SENTENCE_SPLIT.split(text) if part.strip()]


def join_sentences(sentences: list[str], terminate: bool = True) -> str:
    """Join split sentences back together, restoring the final full stop."""
    text = ". ".join(sentences).strip()
    if terminate and text and text[-1] not in ".!?:":
        text += "."
    return text


class ResponseInterpreter:
    """
    Interprets interviewer model output.
    """

    def __init__(
        self,
        job_title: str = "",
        skills: list[str] | None = None,
    ) -> None:
        """
        Initialize the response interpreter.

        Args:
            job_title: Job title used in default follow-up questions.
            skills: Job skills used in default follow-up questions.
        """
        self._job_title = job_title or "this role"
        self._skills = ", ".join(skills) if skills else "the required skills"

    @property
    def default_question(self) -> str:
        """Generic role-relevant follow-up question."""
        return (
            f"Could you tell me more about your experience with {self._skills} "
            f"and how it relates to the {self._job_title} position?"
        )

    def parse_json(self, raw_text: str) -> ParsedResponse | None:
        """
        Strictly parse a ``{feedback, nextQuestion}`` object.

        Returns:
            ParsedResponse, or None when there is no usable object.
        """
        block = extract_json_block(raw_text)
        if block is None:
            return None
        try:
            data = json.loads(block)
        except json.JSONDecodeError as e:
            logger.debug(f"Model output is not valid JSON: {e}")
            return None
        if not isinstance(data, dict):
            return None

        feedback = data.get("feedback")
        next_question = data.get("nextQuestion", data.get("next_question"))
        if not isinstance(feedback, str) and not isinstance(next_question, str):
            return None
        return ParsedResponse(
            feedback=feedback.strip() if isinstance(feedback, str) else "",
            next_question=next_question.strip() if isinstance(next_question, str) else "",
        )

    def split_fallback(
        self,
        phase: InterviewPhase,
        raw_text: str,
        classification: IntentClassification | None = None,
    ) -> FallbackResponse:
        """
        Allocate unstructured text between feedback and next question.

        The first half of the sentences (rounded up) becomes feedback and the
        rest the next question. With fewer than two sentences the whole text
        goes to the next question for clarification or final-questions
        turns, and to feedback otherwise.
        """
        text = raw_text.strip()
        sentences = split_sentences(text)
        if len(sentences) >= 2:
            half = math.ceil(len(sentences) / 2)
            return FallbackResponse(
                feedback=join_sentences(sentences[:half]),
                next_question=join_sentences(sentences[half:], terminate=text.endswith(".")),
                sentence_count=len(sentences),
            )

        is_clarification = bool(classification and classification.is_clarification)
        if is_clarification or phase == InterviewPhase.FINAL_QUESTIONS:
            return FallbackResponse(next_question=text, sentence_count=len(sentences))
        return FallbackResponse(feedback=text, sentence_count=len(sentences))

    def interpret(
        self,
        phase: InterviewPhase,
        raw_text: str,
        classification: IntentClassification | None = None,
    ) -> Interpretation:
        """
        Interpret model output for a turn.

        Args:
            phase: Phase the reply belongs to.
            raw_text: Raw model output.
            classification: Classifier output for the candidate's utterance.

        Returns:
            Interpretation with non-empty fields (closing replies carry no
            next question).
        """
        text = raw_text.strip() if isinstance(raw_text, str) else ""

        if phase in _ENDING_PHASES:
            return Interpretation(
                feedback=text or self.fallback_response(phase).feedback,
                next_question="",
                source="closing",
            )

        result: ParsedResponse | FallbackResponse | None = self.parse_json(text)
        if result is None:
            logger.warning("Could not parse model output as JSON, using sentence fallback")
            result = self.split_fallback(phase, text, classification)

        return Interpretation(
            feedback=result.feedback or DEFAULT_FEEDBACK,
            next_question=result.next_question or self.default_question,
            source=result.kind,
        )

    def fallback_response(
        self,
        phase: InterviewPhase,
        classification: IntentClassification | None = None,
    ) -> Interpretation:
        """
        Hardcoded phase-appropriate reply used when generation fails.

        Args:
            phase: Phase the reply belongs to.
            classification: Classifier output for the candidate's utterance.

        Returns:
            Interpretation tagged as a generation failure.
        """
        if phase in _ENDING_PHASES:
            return Interpretation(
                feedback=(
                    f"Thank you so much for taking the time to discuss the {self._job_title} "
                    "position with me today. I appreciate your thoughtful responses throughout "
                    "our conversation. This concludes our interview, and our hiring team will "
                    "review your candidacy and be in touch soon with next steps. Best of luck!"
                ),
                next_question="",
                source="generation_failure",
            )

        if classification and classification.is_clarification:
            return Interpretation(
                feedback="Of course, let me put that another way.",
                next_question=(
                    "Could you walk me through your experience with "
                    f"{self._skills} as it relates to this role?"
                ),
                source="generation_failure",
            )

        if phase == InterviewPhase.FINAL_QUESTIONS:
            if classification and classification.is_final_questions_request:
                question = "Please go ahead with your questions, and I'll do my best to answer them."
            else:
                question = (
                    "We've covered all of my questions. Do you have any questions for me "
                    "about the role, the team, or the process?"
                )
            return Interpretation(
                feedback="Thank you for your answers so far.",
                next_question=question,
                source="generation_failure",
            )

        return Interpretation(
            feedback="I appreciate you sharing that insight with me.",
            next_question=(
                "Can you describe a challenging situation you faced in your career related to "
                f"{self._skills} and how you approached solving it?"
            ),
            source="generation_failure",
        )
