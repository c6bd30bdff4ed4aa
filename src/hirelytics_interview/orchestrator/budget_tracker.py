"""
Category budget tracking.

Keeps per-category question counts against their configured maximums and
moves the interview on to the next open category once one is exhausted.
"""

import logging

from hirelytics_interview.orchestrator.schemas import InterviewState

logger = logging.getLogger(__name__)


def first_open_category(state: InterviewState) -> str | None:
    """
    Get the first category, in configured order, that is not yet completed.

    Args:
        state: Interview state.

    Returns:
        The category key, or None when every category is complete.
    """
    for category in state.max_questions_per_category:
        if category not in state.completed_categories:
            return category
    return None


def remaining_categories(state: InterviewState) -> list[str]:
    """Get all categories not yet completed, in configured order."""
    return [c for c in state.max_questions_per_category if c not in state.completed_categories]


class CategoryBudgetTracker:
    """
    Applies one answered question to the category budget.

    The caller decides whether a turn counts; the tracker only records it.
    """

    def advance(self, state: InterviewState) -> tuple[InterviewState, bool]:
        """
        Record one answered question for the current category.

        Args:
            state: Interview state before the turn. Not modified.

        Returns:
            Tuple of (updated copy of the state, whether the current
            category was completed by this answer).
        """
        category = state.current_category
        if category is None:
            logger.debug("No open category; budget unchanged")
            return state.model_copy(deep=True), False

        updated = state.model_copy(deep=True)
        updated.actual_questions_asked += 1
        asked = updated.questions_asked_by_category.get(category, 0) + 1
        updated.questions_asked_by_category[category] = asked

        limit = updated.max_questions_per_category.get(category, 0)
        if asked < limit:
            return updated, False

        if category not in updated.completed_categories:
            updated.completed_categories.append(category)
        updated.current_category = first_open_category(updated)
        logger.info(
            f"Category '{category}' complete ({asked}/{limit}); "
            f"next category: {updated.current_category}"
        )
        return updated, True
