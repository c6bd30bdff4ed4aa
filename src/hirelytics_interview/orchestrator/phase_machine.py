"""
Interview phase state machine.

Pure functions that compute a turn's effect on the interview state:
clarification counting, the category budget update and the phase
transition. Nothing here performs I/O; callers persist the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from hirelytics_interview.agents.intent_classifier import IntentClassification, IntentClassifier
from hirelytics_interview.orchestrator.budget_tracker import CategoryBudgetTracker
from hirelytics_interview.orchestrator.errors import SessionCompletedError
from hirelytics_interview.orchestrator.schemas import InterviewPhase, InterviewState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnTransition:
    """Outcome of applying one candidate turn to the state."""

    previous_phase: InterviewPhase
    state: InterviewState
    counted_as_answer: bool
    category_completed: bool

    @property
    def phase(self) -> InterviewPhase:
        """Phase after the turn."""
        return self.state.current_phase

    @property
    def phase_changed(self) -> bool:
        """Whether the turn moved the interview to a new phase."""
        return self.previous_phase != self.state.current_phase


def counts_as_answer(phase: InterviewPhase, classification: IntentClassification) -> bool:
    """Whether a turn in this phase consumes question budget."""
    return (
        phase == InterviewPhase.QUESTIONS
        and not classification.is_clarification
        and not classification.is_final_questions_request
    )


def next_phase(
    phase: InterviewPhase,
    state: InterviewState,
    classification: IntentClassification,
    utterance: str,
    classifier: IntentClassifier,
) -> InterviewPhase:
    """
    Compute the phase that follows a candidate turn.

    Args:
        phase: Phase the turn was received in.
        state: State after this turn's budget update.
        classification: Classifier output for the utterance.
        utterance: Raw candidate utterance.
        classifier: Classifier used for the "no more questions" check.

    Returns:
        The next phase.

    Raises:
        SessionCompletedError: If the interview has already completed.
    """
    if phase == InterviewPhase.INTRODUCTION:
        return InterviewPhase.CANDIDATE_INTRO

    if phase == InterviewPhase.CANDIDATE_INTRO:
        if classification.is_clarification:
            return InterviewPhase.CANDIDATE_INTRO
        return InterviewPhase.QUESTIONS

    if phase == InterviewPhase.QUESTIONS:
        budget_exhausted = bool(state.max_questions_per_category) and state.current_category is None
        if state.actual_questions_asked >= state.total_questions or budget_exhausted:
            return InterviewPhase.FINAL_QUESTIONS
        return InterviewPhase.QUESTIONS

    if phase == InterviewPhase.FINAL_QUESTIONS:
        if classifier.indicates_no_more_questions(utterance):
            return InterviewPhase.CLOSING
        return InterviewPhase.FINAL_QUESTIONS

    if phase == InterviewPhase.CLOSING:
        return InterviewPhase.COMPLETED

    raise SessionCompletedError("Interview has already been completed.")


def apply_turn(
    state: InterviewState,
    utterance: str,
    classification: IntentClassification,
    classifier: IntentClassifier,
    tracker: CategoryBudgetTracker | None = None,
    now: datetime | None = None,
) -> TurnTransition:
    """
    Apply a candidate turn to the interview state.

    The input state is never modified; if this raises, the caller still
    holds the unchanged state.

    Args:
        state: Current interview state.
        utterance: Raw candidate utterance.
        classification: Classifier output for the utterance.
        classifier: Classifier used for phrase checks.
        tracker: Budget tracker. Creates default if None.
        now: Timestamp for lastActivityAt (defaults to current UTC time).

    Returns:
        The transition with the updated state copy.
    """
    tracker = tracker or CategoryBudgetTracker()
    previous = state.current_phase

    if previous == InterviewPhase.COMPLETED:
        raise SessionCompletedError("Interview has already been completed.")

    counted = counts_as_answer(previous, classification)
    category_completed = False
    if counted:
        updated, category_completed = tracker.advance(state)
        updated.current_question_index = updated.actual_questions_asked
    else:
        updated = state.model_copy(deep=True)

    if classification.is_clarification:
        updated.clarification_requests += 1

    phase = next_phase(previous, updated, classification, utterance, classifier)
    if phase == InterviewPhase.FINAL_QUESTIONS and previous != InterviewPhase.FINAL_QUESTIONS:
        updated.is_waiting_for_final_questions = True

    updated.current_phase = phase
    updated.last_activity_at = now or datetime.now(timezone.utc)

    if phase != previous:
        logger.info(f"Phase transition: {previous.value} -> {phase.value}")

    return TurnTransition(
        previous_phase=previous,
        state=updated,
        counted_as_answer=counted,
        category_completed=category_completed,
    )
