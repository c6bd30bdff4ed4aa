"""
Pydantic schemas for the orchestrator module.

Defines the persisted interview state, transcript messages, the application
record handed over by the surrounding platform, and the result objects
returned by the orchestrator.

Persisted models serialise with camelCase aliases and ISO-8601 timestamps so
a record written by one process can be re-loaded by another.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class InterviewPhase(str, Enum):
    """Phases of the interview conversation, in progression order."""

    INTRODUCTION = "introduction"
    CANDIDATE_INTRO = "candidate_intro"
    QUESTIONS = "questions"
    FINAL_QUESTIONS = "final_questions"
    CLOSING = "closing"
    COMPLETED = "completed"


class MessageRole(str, Enum):
    """Role of the speaker in a transcript message."""

    ASSISTANT = "assistant"
    USER = "user"


class ApplicationStatus(str, Enum):
    """Top-level status of a job application."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    REVIEWED = "reviewed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class DocumentModel(BaseModel):
    """Base for models stored as JSON documents (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        """Serialise to a plain JSON-compatible dict."""
        return self.model_dump(mode="json", by_alias=True)


class CategoryConfig(DocumentModel):
    """Question quota for one category."""

    type: str = Field(..., description="Category key (e.g. 'technical', 'behavioral')")
    number_of_questions: int = Field(..., ge=0, description="Maximum questions for this category")


class PredefinedQuestion(DocumentModel):
    """A question configured by the recruiter for a category."""

    id: str = Field(default="", description="Question identifier")
    type: str = Field(..., description="Category key the question belongs to")
    question: str = Field(..., description="Question text")
    is_ai_generated: bool = Field(default=False, alias="isAIGenerated")


class InstructionsForAi(DocumentModel):
    """Interview configuration attached to the job."""

    instruction: str = Field(default="", description="Free-text instructions from the recruiter")
    difficulty_level: str = Field(default="normal", description="easy, normal, hard, expert or advanced")
    question_mode: str = Field(default="ai-mode", description="manual or ai-mode")
    total_questions: int | None = Field(default=None, ge=1, description="Total questions across all categories")
    category_configs: list[CategoryConfig] = Field(default_factory=list)
    questions: list[PredefinedQuestion] = Field(default_factory=list)


class JobDetails(DocumentModel):
    """Job information relevant to the interview."""

    title: str = Field(default="", description="Job title")
    description: str = Field(default="", description="Job description")
    skills: list[str] = Field(default_factory=list, description="Key skills for the role")
    requirements: str = Field(default="", description="Role requirements")
    benefits: str = Field(default="", description="Role benefits")


class CandidateInfo(DocumentModel):
    """Candidate contact information."""

    name: str = Field(default="", description="Candidate's name")
    email: str = Field(default="", description="Candidate's email address")


class SessionInstruction(DocumentModel):
    """Session settings; only the duration matters to the orchestrator."""

    duration: int | None = Field(default=None, ge=1, description="Interview duration in minutes")


class QuestionRecord(DocumentModel):
    """One processed turn in the question history."""

    question_id: str
    category_type: str
    question: str
    asked: bool = True
    answered: bool = False
    is_repeat: bool = False
    is_clarification: bool = False
    timestamp: datetime = Field(default_factory=_now_utc)
    user_response: str | None = None
    feedback: str | None = None


class InterviewState(DocumentModel):
    """Persisted state of one interview session."""

    current_phase: InterviewPhase = InterviewPhase.INTRODUCTION
    current_question_index: int = Field(default=0, ge=0)
    total_questions: int = Field(..., ge=1, description="Fixed at session creation")
    questions_asked_by_category: dict[str, int] = Field(default_factory=dict)
    max_questions_per_category: dict[str, int] = Field(default_factory=dict)
    completed_categories: list[str] = Field(default_factory=list)
    current_category: str | None = None
    question_history: list[QuestionRecord] = Field(default_factory=list)
    clarification_requests: int = Field(default=0, ge=0)
    actual_questions_asked: int = Field(default=0, ge=0)
    started_at: datetime = Field(default_factory=_now_utc)
    last_activity_at: datetime = Field(default_factory=_now_utc)
    estimated_completion: datetime | None = None
    is_waiting_for_final_questions: bool = False


class ConversationMessage(DocumentModel):
    """A single transcript message."""

    message_id: str = Field(default="", description="Unique message identifier")
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=_now_utc)
    phase: InterviewPhase | None = Field(default=None, description="Phase the message belongs to")
    question_index: int | None = Field(default=None, description="Questions answered when written")
    question_id: str | None = None
    category_type: str | None = None
    is_repeat: bool = False
    is_clarification: bool = False


class ApplicationRecord(DocumentModel):
    """Job application as provided by the surrounding platform."""

    uuid: str = Field(..., description="Application UUID")
    status: ApplicationStatus = ApplicationStatus.PENDING
    candidate: CandidateInfo = Field(default_factory=CandidateInfo)
    job_details: JobDetails = Field(default_factory=JobDetails)
    instructions_for_ai: InstructionsForAi = Field(default_factory=InstructionsForAi)
    session_instruction: SessionInstruction = Field(default_factory=SessionInstruction)
    preferred_language: str | None = None
    interview_state: InterviewState | None = None
    interview_conversation: list[ConversationMessage] = Field(default_factory=list)
    version: int = Field(default=0, ge=0, description="Optimistic concurrency counter")


class PendingUpdate(BaseModel):
    """
    A single atomic write assembled by the pure state functions.

    The store sets the state and status, appends (or, on restart, replaces)
    the transcript, and bumps the version, all or nothing.
    """

    uuid: str
    state: InterviewState
    append_messages: list[ConversationMessage] = Field(default_factory=list)
    replace_conversation: bool = False
    status: ApplicationStatus = ApplicationStatus.IN_PROGRESS
    expected_version: int = 0


class ProgressInfo(BaseModel):
    """Progress summary returned to callers."""

    current_question: int
    total_questions: int
    current_category: str | None = None
    completed_categories: list[str] = Field(default_factory=list)
    remaining_categories: list[str] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Tagged success/failure envelope for orchestrator operations."""

    success: bool
    error: str | None = None


class InitializeResult(OperationResult):
    """Result of starting (or resuming) a session."""

    state: InterviewState | None = None
    first_message: str = ""
    progress_info: ProgressInfo | None = None
    resumed: bool = False


class TurnResult(OperationResult):
    """Result of processing one candidate utterance."""

    feedback: str = ""
    next_question: str = ""
    state: InterviewState | None = None
    is_completed: bool = False
    current_phase: InterviewPhase | None = None
    progress_info: ProgressInfo | None = None


class StateResult(OperationResult):
    """Stored state and transcript of a session."""

    state: InterviewState | None = None
    transcript: list[ConversationMessage] = Field(default_factory=list)


class CompletionResult(OperationResult):
    """Result of explicitly completing a session."""

    final_message: str = ""
    state: InterviewState | None = None
