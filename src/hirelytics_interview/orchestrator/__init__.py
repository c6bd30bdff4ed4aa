"""
Orchestrator module for managing interview flow and coordination.

The session orchestrator itself lives in
``hirelytics_interview.orchestrator.interview_orchestrator``.
"""

from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    ApplicationStatus,
    CompletionResult,
    ConversationMessage,
    InitializeResult,
    InterviewPhase,
    InterviewState,
    MessageRole,
    PendingUpdate,
    ProgressInfo,
    StateResult,
    TurnResult,
)
from hirelytics_interview.orchestrator.errors import (
    ConcurrentUpdateError,
    InterviewError,
    PersistenceError,
    SessionCompletedError,
    SessionNotFoundError,
)
from hirelytics_interview.orchestrator.budget_tracker import CategoryBudgetTracker
from hirelytics_interview.orchestrator.phase_machine import TurnTransition, apply_turn
from hirelytics_interview.orchestrator.interview_state import (
    build_progress_info,
    create_initial_state,
)

__all__ = [
    "ApplicationRecord",
    "ApplicationStatus",
    "CategoryBudgetTracker",
    "CompletionResult",
    "ConcurrentUpdateError",
    "ConversationMessage",
    "InitializeResult",
    "InterviewError",
    "InterviewPhase",
    "InterviewState",
    "MessageRole",
    "PendingUpdate",
    "PersistenceError",
    "ProgressInfo",
    "SessionCompletedError",
    "SessionNotFoundError",
    "StateResult",
    "TurnResult",
    "TurnTransition",
    "apply_turn",
    "build_progress_info",
    "create_initial_state",
]
