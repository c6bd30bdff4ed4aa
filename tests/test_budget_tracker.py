"""
Tests for category budget tracking and initial state creation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from hirelytics_interview.orchestrator.budget_tracker import (
    CategoryBudgetTracker,
    first_open_category,
    remaining_categories,
)
from hirelytics_interview.orchestrator.interview_state import (
    DEFAULT_CATEGORY,
    build_progress_info,
    create_initial_state,
)
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    CategoryConfig,
    InstructionsForAi,
    InterviewPhase,
    InterviewState,
)


class TestCreateInitialState:
    """Tests for create_initial_state."""

    def test_categories_from_job_config(self, application: ApplicationRecord) -> None:
        now = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)

        state = create_initial_state(application, now=now)

        assert state.current_phase == InterviewPhase.INTRODUCTION
        assert state.total_questions == 3
        assert state.max_questions_per_category == {"technical": 2, "behavioral": 1}
        assert state.questions_asked_by_category == {"technical": 0, "behavioral": 0}
        assert state.current_category == "technical"
        assert state.completed_categories == []
        assert state.started_at == now
        assert state.estimated_completion == now + timedelta(minutes=45)

    def test_defaults_without_configuration(self) -> None:
        state = create_initial_state(ApplicationRecord(uuid="bare"), default_total_questions=4)

        assert state.total_questions == 4
        assert state.max_questions_per_category == {DEFAULT_CATEGORY: 4}
        assert state.current_category == DEFAULT_CATEGORY
        assert state.estimated_completion - state.started_at == timedelta(minutes=30)

    def test_zero_quota_category_starts_completed(self) -> None:
        application = ApplicationRecord(
            uuid="zero",
            instructions_for_ai=InstructionsForAi(
                total_questions=2,
                category_configs=[
                    CategoryConfig(type="technical", number_of_questions=0),
                    CategoryConfig(type="behavioral", number_of_questions=2),
                ],
            ),
        )

        state = create_initial_state(application)

        assert state.completed_categories == ["technical"]
        assert state.current_category == "behavioral"

    def test_serialises_with_iso_timestamps(self, application: ApplicationRecord) -> None:
        state = create_initial_state(application)

        document = state.to_document()

        assert isinstance(document["startedAt"], str)
        assert document["currentPhase"] == "introduction"
        assert InterviewState.model_validate(document) == state


class TestCategoryBudgetTracker:
    """Tests for CategoryBudgetTracker."""

    @pytest.fixture
    def tracker(self) -> CategoryBudgetTracker:
        return CategoryBudgetTracker()

    @pytest.fixture
    def state(self, application: ApplicationRecord) -> InterviewState:
        return create_initial_state(application)

    def test_advance_increments_counts(self, tracker: CategoryBudgetTracker, state: InterviewState) -> None:
        updated, completed = tracker.advance(state)

        assert not completed
        assert updated.actual_questions_asked == 1
        assert updated.questions_asked_by_category["technical"] == 1
        assert updated.current_category == "technical"
        # Input state is untouched.
        assert state.actual_questions_asked == 0

    def test_category_completion_moves_to_next(
        self,
        tracker: CategoryBudgetTracker,
        state: InterviewState,
    ) -> None:
        state, _ = tracker.advance(state)
        state, completed = tracker.advance(state)

        assert completed
        assert state.completed_categories == ["technical"]
        assert state.current_category == "behavioral"
        assert remaining_categories(state) == ["behavioral"]

    def test_all_categories_exhausted(self, tracker: CategoryBudgetTracker, state: InterviewState) -> None:
        for _ in range(3):
            state, _ = tracker.advance(state)

        assert state.completed_categories == ["technical", "behavioral"]
        assert state.current_category is None
        assert first_open_category(state) is None

    def test_noop_without_current_category(
        self,
        tracker: CategoryBudgetTracker,
        state: InterviewState,
    ) -> None:
        state.current_category = None

        updated, completed = tracker.advance(state)

        assert not completed
        assert updated.actual_questions_asked == 0
        assert updated.questions_asked_by_category == state.questions_asked_by_category

    def test_budget_monotonicity(self, tracker: CategoryBudgetTracker, state: InterviewState) -> None:
        previous_total = 0
        for _ in range(10):
            state, _ = tracker.advance(state)
            for category, asked in state.questions_asked_by_category.items():
                assert asked <= state.max_questions_per_category[category]
            assert state.actual_questions_asked == sum(state.questions_asked_by_category.values())
            assert state.actual_questions_asked >= previous_total
            assert len(state.completed_categories) == len(set(state.completed_categories))
            previous_total = state.actual_questions_asked

        assert state.actual_questions_asked == 3

    def test_progress_info(self, tracker: CategoryBudgetTracker, state: InterviewState) -> None:
        state, _ = tracker.advance(state)
        state, _ = tracker.advance(state)

        progress = build_progress_info(state)

        assert progress.current_question == 2
        assert progress.total_questions == 3
        assert progress.current_category == "behavioral"
        assert progress.completed_categories == ["technical"]
        assert progress.remaining_categories == ["behavioral"]
