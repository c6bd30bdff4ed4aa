"""
Interview state management.

Creates the initial session state from the application's configuration and
assembles the pending updates written to the store after each step.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from hirelytics_interview.agents.intent_classifier import IntentClassification
from hirelytics_interview.agents.response_interpreter import Interpretation
from hirelytics_interview.orchestrator.budget_tracker import first_open_category, remaining_categories
from hirelytics_interview.orchestrator.phase_machine import TurnTransition
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    ApplicationStatus,
    ConversationMessage,
    InterviewPhase,
    InterviewState,
    MessageRole,
    PendingUpdate,
    ProgressInfo,
    QuestionRecord,
)

# Category used when the job configures no categories.
DEFAULT_CATEGORY = "general"


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def create_initial_state(
    application: ApplicationRecord,
    default_total_questions: int = 5,
    default_duration_minutes: int = 30,
    now: datetime | None = None,
) -> InterviewState:
    """
    Build a fresh interview state from the application's configuration.

    Args:
        application: Application record with the job's interview settings.
        default_total_questions: Used when the job sets no question count.
        default_duration_minutes: Used when the job sets no duration.
        now: Session start time (defaults to current UTC time).

    Returns:
        The initial state, in the introduction phase.
    """
    now = now or datetime.now(timezone.utc)
    instructions = application.instructions_for_ai
    total_questions = instructions.total_questions or default_total_questions

    max_per_category: dict[str, int] = {}
    for config in instructions.category_configs:
        max_per_category[config.type] = max_per_category.get(config.type, 0) + config.number_of_questions
    if not max_per_category:
        max_per_category[DEFAULT_CATEGORY] = total_questions

    state = InterviewState(
        current_phase=InterviewPhase.INTRODUCTION,
        total_questions=total_questions,
        questions_asked_by_category={category: 0 for category in max_per_category},
        max_questions_per_category=max_per_category,
        # A zero quota is already exhausted.
        completed_categories=[c for c, limit in max_per_category.items() if limit <= 0],
        started_at=now,
        last_activity_at=now,
        estimated_completion=now
        + timedelta(minutes=application.session_instruction.duration or default_duration_minutes),
    )
    state.current_category = first_open_category(state)
    return state


def build_progress_info(state: InterviewState) -> ProgressInfo:
    """Summarise interview progress for callers."""
    return ProgressInfo(
        current_question=state.actual_questions_asked,
        total_questions=state.total_questions,
        current_category=state.current_category,
        completed_categories=list(state.completed_categories),
        remaining_categories=remaining_categories(state),
    )


def status_for(state: InterviewState) -> ApplicationStatus:
    """Application status implied by the interview phase."""
    if state.current_phase == InterviewPhase.COMPLETED:
        return ApplicationStatus.COMPLETED
    return ApplicationStatus.IN_PROGRESS


def build_start_update(
    application: ApplicationRecord,
    state: InterviewState,
    introduction: str,
    now: datetime | None = None,
) -> PendingUpdate:
    """
    Assemble the write that starts (or restarts) a session.

    The transcript is replaced by the single introduction message.
    """
    message = ConversationMessage(
        message_id=_new_id("msg_ai"),
        role=MessageRole.ASSISTANT,
        content=introduction,
        timestamp=now or datetime.now(timezone.utc),
        phase=InterviewPhase.INTRODUCTION,
        question_index=0,
    )
    return PendingUpdate(
        uuid=application.uuid,
        state=state,
        append_messages=[message],
        replace_conversation=True,
        status=ApplicationStatus.IN_PROGRESS,
        expected_version=application.version,
    )


def spoken_reply(interpretation: Interpretation) -> str:
    """Text the candidate hears for an interpreted reply."""
    return " ".join(part for part in (interpretation.feedback, interpretation.next_question) if part)


def build_turn_update(
    application: ApplicationRecord,
    transition: TurnTransition,
    utterance: str,
    classification: IntentClassification,
    interpretation: Interpretation,
    now: datetime | None = None,
) -> PendingUpdate:
    """
    Assemble the write for one processed turn.

    Appends a question record to the state's history and the candidate and
    interviewer messages to the transcript. Earlier entries are untouched.
    """
    now = now or datetime.now(timezone.utc)
    state = transition.state.model_copy(deep=True)
    question_id = _new_id("q")
    category = state.current_category or DEFAULT_CATEGORY

    state.question_history.append(
        QuestionRecord(
            question_id=question_id,
            category_type=category,
            question=interpretation.next_question,
            asked=True,
            answered=not classification.is_clarification,
            is_repeat=classification.is_clarification,
            is_clarification=classification.is_clarification,
            timestamp=now,
            user_response=utterance,
            feedback=interpretation.feedback,
        )
    )

    messages = [
        ConversationMessage(
            message_id=_new_id("msg_user"),
            role=MessageRole.USER,
            content=utterance,
            timestamp=now,
            phase=transition.previous_phase,
            question_index=state.actual_questions_asked,
            question_id=question_id,
            category_type=category,
            is_repeat=False,
            is_clarification=classification.is_clarification,
        ),
        ConversationMessage(
            message_id=_new_id("msg_ai"),
            role=MessageRole.ASSISTANT,
            content=spoken_reply(interpretation),
            timestamp=now,
            phase=state.current_phase,
            question_index=state.actual_questions_asked,
            question_id=question_id,
            category_type=category,
            is_repeat=classification.is_clarification,
            is_clarification=False,
        ),
    ]

    return PendingUpdate(
        uuid=application.uuid,
        state=state,
        append_messages=messages,
        status=status_for(state),
        expected_version=application.version,
    )


def build_completion_update(
    application: ApplicationRecord,
    state: InterviewState,
    final_message: str,
    now: datetime | None = None,
) -> PendingUpdate:
    """Assemble the write that explicitly completes a session."""
    now = now or datetime.now(timezone.utc)
    completed = state.model_copy(deep=True)
    completed.current_phase = InterviewPhase.COMPLETED
    completed.last_activity_at = now

    message = ConversationMessage(
        message_id=_new_id("msg_ai"),
        role=MessageRole.ASSISTANT,
        content=final_message,
        timestamp=now,
        phase=InterviewPhase.COMPLETED,
        question_index=completed.actual_questions_asked,
    )
    return PendingUpdate(
        uuid=application.uuid,
        state=completed,
        append_messages=[message],
        status=ApplicationStatus.COMPLETED,
        expected_version=application.version,
    )
