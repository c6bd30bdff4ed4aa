"""
Tests for the interview phase state machine.
"""

from datetime import datetime, timezone

import pytest

from hirelytics_interview.agents.intent_classifier import IntentClassification, IntentClassifier
from hirelytics_interview.orchestrator.errors import SessionCompletedError
from hirelytics_interview.orchestrator.interview_state import create_initial_state
from hirelytics_interview.orchestrator.phase_machine import apply_turn, counts_as_answer
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    CategoryConfig,
    InstructionsForAi,
    InterviewPhase,
    InterviewState,
)


def _state(configs: list[tuple[str, int]], total: int, phase: InterviewPhase) -> InterviewState:
    application = ApplicationRecord(
        uuid="app",
        instructions_for_ai=InstructionsForAi(
            total_questions=total,
            category_configs=[CategoryConfig(type=t, number_of_questions=n) for t, n in configs],
        ),
    )
    state = create_initial_state(application)
    state.current_phase = phase
    return state


class TestApplyTurn:
    """Tests for apply_turn."""

    @pytest.fixture
    def classifier(self) -> IntentClassifier:
        return IntentClassifier()

    def _turn(self, state: InterviewState, utterance: str, classifier: IntentClassifier):
        return apply_turn(state, utterance, classifier.classify(utterance), classifier)

    def test_two_answers_exhaust_single_category(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 2)], total=2, phase=InterviewPhase.QUESTIONS)

        first = self._turn(state, "I have built several REST APIs in Python.", classifier)
        assert first.phase == InterviewPhase.QUESTIONS
        assert first.state.actual_questions_asked == 1

        second = self._turn(first.state, "I tune Postgres indexes regularly.", classifier)

        assert second.state.completed_categories == ["technical"]
        assert second.previous_phase == InterviewPhase.QUESTIONS
        assert second.phase == InterviewPhase.FINAL_QUESTIONS
        assert second.phase_changed
        assert second.category_completed
        assert second.state.is_waiting_for_final_questions

    def test_clarification_leaves_budget_unchanged(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 2)], total=2, phase=InterviewPhase.QUESTIONS)

        transition = self._turn(state, "can you repeat that?", classifier)

        assert not transition.counted_as_answer
        assert transition.phase == InterviewPhase.QUESTIONS
        assert transition.state.actual_questions_asked == state.actual_questions_asked
        assert transition.state.questions_asked_by_category == state.questions_asked_by_category
        assert transition.state.current_category == state.current_category
        assert transition.state.clarification_requests == state.clarification_requests + 1

    def test_no_more_questions_moves_to_closing(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.FINAL_QUESTIONS)

        transition = self._turn(state, "no, I don't have any questions", classifier)

        assert transition.phase == InterviewPhase.CLOSING

    def test_final_questions_continue_while_candidate_asks(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.FINAL_QUESTIONS)

        transition = self._turn(state, "What does a typical week look like for the team?", classifier)

        assert transition.phase == InterviewPhase.FINAL_QUESTIONS

    def test_introduction_moves_to_candidate_intro(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.INTRODUCTION)

        transition = self._turn(state, "Hello, happy to be here.", classifier)

        assert transition.phase == InterviewPhase.CANDIDATE_INTRO

    def test_candidate_intro_clarification_stays(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.CANDIDATE_INTRO)

        transition = self._turn(state, "Sorry, could you rephrase?", classifier)

        assert transition.phase == InterviewPhase.CANDIDATE_INTRO
        assert transition.state.clarification_requests == 1

    def test_candidate_intro_answer_is_not_counted(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 2)], total=2, phase=InterviewPhase.CANDIDATE_INTRO)

        transition = self._turn(state, "I'm a backend engineer with six years of experience.", classifier)

        assert transition.phase == InterviewPhase.QUESTIONS
        assert transition.state.actual_questions_asked == 0

    def test_final_questions_request_is_not_counted(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 2)], total=2, phase=InterviewPhase.QUESTIONS)

        transition = self._turn(state, "Before we go on, can I ask something about the team?", classifier)

        assert not transition.counted_as_answer
        assert transition.state.actual_questions_asked == 0
        assert transition.phase == InterviewPhase.QUESTIONS

    def test_exhausted_categories_end_questions_early(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=5, phase=InterviewPhase.QUESTIONS)

        transition = self._turn(state, "I use pytest for all of my services.", classifier)

        assert transition.state.current_category is None
        assert transition.phase == InterviewPhase.FINAL_QUESTIONS

    def test_closing_moves_to_completed(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.CLOSING)

        transition = self._turn(state, "Thank you!", classifier)

        assert transition.phase == InterviewPhase.COMPLETED

    def test_completed_rejects_turns(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.COMPLETED)
        before = state.model_copy(deep=True)

        with pytest.raises(SessionCompletedError):
            self._turn(state, "Hello?", classifier)

        assert state == before

    def test_completed_only_reachable_from_closing(self, classifier: IntentClassifier) -> None:
        utterances = [
            "no",
            "can you repeat that?",
            "I have questions",
            "My answer is about caching.",
            "",
        ]
        for phase in (
            InterviewPhase.INTRODUCTION,
            InterviewPhase.CANDIDATE_INTRO,
            InterviewPhase.QUESTIONS,
            InterviewPhase.FINAL_QUESTIONS,
        ):
            for utterance in utterances:
                state = _state([("technical", 1)], total=1, phase=phase)
                transition = self._turn(state, utterance, classifier)
                assert transition.phase != InterviewPhase.COMPLETED

    def test_last_activity_updated(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 1)], total=1, phase=InterviewPhase.QUESTIONS)
        now = datetime(2030, 1, 1, tzinfo=timezone.utc)

        transition = apply_turn(
            state,
            "An answer.",
            IntentClassification(),
            classifier,
            now=now,
        )

        assert transition.state.last_activity_at == now

    def test_input_state_not_modified(self, classifier: IntentClassifier) -> None:
        state = _state([("technical", 2)], total=2, phase=InterviewPhase.QUESTIONS)
        before = state.model_copy(deep=True)

        self._turn(state, "Some answer about Python.", classifier)

        assert state == before


class TestCountsAsAnswer:
    """Tests for counts_as_answer."""

    def test_only_plain_answers_in_questions_phase_count(self) -> None:
        plain = IntentClassification()
        clarification = IntentClassification(is_clarification=True)
        final_request = IntentClassification(is_final_questions_request=True)

        assert counts_as_answer(InterviewPhase.QUESTIONS, plain)
        assert not counts_as_answer(InterviewPhase.QUESTIONS, clarification)
        assert not counts_as_answer(InterviewPhase.QUESTIONS, final_request)
        assert not counts_as_answer(InterviewPhase.CANDIDATE_INTRO, plain)
        assert not counts_as_answer(InterviewPhase.FINAL_QUESTIONS, plain)
