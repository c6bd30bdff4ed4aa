"""
Shared fixtures for the interview orchestrator tests.
"""

import pytest

from hirelytics_interview.config import Settings
from hirelytics_interview.models.llm_client import (
    GenerationRequest,
    GenerationResult,
    LLMClientBase,
    LLMError,
)
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    CandidateInfo,
    CategoryConfig,
    InstructionsForAi,
    JobDetails,
    PredefinedQuestion,
    SessionInstruction,
)


class FakeLLMClient(LLMClientBase):
    """Scripted LLM client that records every request."""

    def __init__(self, replies: list[str] | None = None, default: str | None = None) -> None:
        self.replies = list(replies or [])
        self.default = default
        self.requests: list[GenerationRequest] = []
        self.fail = False
        self.closed = False

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        self.requests.append(request)
        if self.fail:
            raise LLMError("model unavailable")
        if self.replies:
            return GenerationResult(text=self.replies.pop(0), model=request.model)
        if self.default is not None:
            return GenerationResult(text=self.default, model=request.model)
        return GenerationResult(
            text='{"feedback": "Good answer.", "nextQuestion": "What else can you tell me?"}',
            model=request.model,
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        llm_provider="ollama",
        llm_model_name="test-model",
        assistant_name="Hirelytics AI",
        history_window=10,
    )


@pytest.fixture
def application() -> ApplicationRecord:
    """A job application with two question categories."""
    return ApplicationRecord(
        uuid="app-001",
        candidate=CandidateInfo(name="Jane Doe", email="jane.doe@example.com"),
        job_details=JobDetails(
            title="Backend Engineer",
            description="Build and run our API platform.",
            skills=["Python", "PostgreSQL", "Kubernetes", "AWS"],
        ),
        instructions_for_ai=InstructionsForAi(
            instruction="Focus on production experience.",
            difficulty_level="hard",
            total_questions=3,
            category_configs=[
                CategoryConfig(type="technical", number_of_questions=2),
                CategoryConfig(type="behavioral", number_of_questions=1),
            ],
            questions=[
                PredefinedQuestion(
                    id="q1",
                    type="technical",
                    question="How do you design a database schema for high write volume?",
                ),
            ],
        ),
        session_instruction=SessionInstruction(duration=45),
    )


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    """A fake LLM client with the default JSON reply."""
    return FakeLLMClient()
