"""
Interview orchestrator.

Coordinates one interview session per application: loads the stored
record, runs the candidate's utterance through classification, budget and
phase updates, asks the language model for the interviewer's reply and
writes the result back as a single atomic update.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import TypeVar

from hirelytics_interview.agents.intent_classifier import IntentClassification, IntentClassifier
from hirelytics_interview.agents.prompt_composer import PromptComposer
from hirelytics_interview.agents.response_interpreter import Interpretation, ResponseInterpreter
from hirelytics_interview.config import Settings, get_settings
from hirelytics_interview.db.repository import SessionStore
from hirelytics_interview.models.llm_client import (
    GenerationRequest,
    LLMClient,
    LLMClientBase,
    LLMError,
)
from hirelytics_interview.orchestrator.budget_tracker import CategoryBudgetTracker
from hirelytics_interview.orchestrator.errors import InterviewError, SessionNotFoundError
from hirelytics_interview.orchestrator.interview_state import (
    build_completion_update,
    build_progress_info,
    build_start_update,
    build_turn_update,
    create_initial_state,
)
from hirelytics_interview.orchestrator.phase_machine import TurnTransition, apply_turn
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    CompletionResult,
    InitializeResult,
    InterviewPhase,
    InterviewState,
    MessageRole,
    OperationResult,
    StateResult,
    TurnResult,
)

ResultT = TypeVar("ResultT", bound=OperationResult)

# Generation settings per call site
TURN_TEMPERATURE = 0.7
TURN_MAX_TOKENS = 500
INTRODUCTION_TEMPERATURE = 0.8
INTRODUCTION_MAX_TOKENS = 300
COMPLETION_TEMPERATURE = 0.7
COMPLETION_MAX_TOKENS = 300


class InterviewOrchestrator:
    """
    Orchestrates interview sessions stored in a session store.

    All public operations return a result object with ``success`` and
    ``error`` fields and never raise for missing sessions, completed
    sessions or store failures. Model failures are absorbed with a
    phase-appropriate fallback reply.

    Turns for the same application are serialised in-process; the store's
    version counter rejects writers from other processes.
    """

    def __init__(
        self,
        store: SessionStore,
        llm_client: LLMClientBase | None = None,
        classifier: IntentClassifier | None = None,
        composer: PromptComposer | None = None,
        tracker: CategoryBudgetTracker | None = None,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the interview orchestrator.

        Args:
            store: Session store holding application records.
            llm_client: LLM client for generation. Creates default if None.
            classifier: Intent classifier. Creates default if None.
            composer: Prompt composer. Created from settings if None.
            tracker: Category budget tracker. Creates default if None.
            settings: Application settings. Uses cached settings if None.
        """
        self._logger = logging.getLogger(__name__)
        self._settings = settings or get_settings()
        self._store = store
        self._llm_client = llm_client or LLMClient()
        self._classifier = classifier or IntentClassifier()
        self._composer = composer or PromptComposer(
            assistant_name=self._settings.assistant_name,
            history_window=self._settings.history_window,
        )
        self._tracker = tracker or CategoryBudgetTracker()
        # Entries live only while a caller holds or awaits the lock.
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def _lock_for(self, uuid: str) -> asyncio.Lock:
        lock = self._locks.get(uuid)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[uuid] = lock
        return lock

    def _failure(self, result_type: type[ResultT], uuid: str, error: InterviewError) -> ResultT:
        self._logger.warning(f"Operation on application {uuid} failed: {error}")
        return result_type(success=False, error=str(error))

    async def _load(self, uuid: str) -> ApplicationRecord:
        application = await self._store.get_application(uuid)
        if application is None:
            raise SessionNotFoundError(uuid)
        return application

    @staticmethod
    def _require_state(application: ApplicationRecord) -> InterviewState:
        if application.interview_state is None:
            raise SessionNotFoundError(application.uuid, "Interview session not initialized")
        return application.interview_state

    @staticmethod
    def _last_assistant_message(application: ApplicationRecord) -> str:
        for message in reversed(application.interview_conversation):
            if message.role == MessageRole.ASSISTANT:
                return message.content
        return ""

    @staticmethod
    def _interpreter_for(application: ApplicationRecord) -> ResponseInterpreter:
        return ResponseInterpreter(
            job_title=application.job_details.title,
            skills=application.job_details.skills,
        )

    async def _generate(self, prompt: str, temperature: float, max_tokens: int) -> str:
        """Run one generation call with the configured provider and model."""
        result = await self._llm_client.generate(
            GenerationRequest(
                provider=self._settings.llm_provider,
                model=self._settings.llm_model_name,
                prompt=prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        )
        return result.text

    # Introduction

    @staticmethod
    def _fallback_introduction(application: ApplicationRecord, state: InterviewState) -> str:
        title = application.job_details.title
        if not title:
            return (
                "Hello! I'm Hirelytics AI and it's wonderful to connect with you today. I'll be "
                "conducting your interview and I'm genuinely excited to learn about your professional "
                "journey. We have several thoughtfully structured questions to explore your "
                "qualifications, and I'll provide encouragement and feedback throughout our "
                "conversation. To start, could you please introduce yourself and share what motivates "
                "you in your professional life?"
            )
        name = application.candidate.name
        greeting = f"Hello {name}!" if name else "Hello!"
        skills = ", ".join(application.job_details.skills[:3]) or "key competencies"
        return (
            f"{greeting} I'm Hirelytics AI and it's truly a pleasure to meet you. I'll be conducting "
            f"your interview today for the {title} position. We have {state.total_questions} "
            f"structured questions covering {skills} to explore your qualifications for this role. "
            "To begin, could you please share a brief introduction about yourself and what draws "
            f"you to the {title} field?"
        )

    async def _generate_introduction(self, application: ApplicationRecord, state: InterviewState) -> str:
        prompt = self._composer.build_introduction_prompt(application, state)
        try:
            return await self._generate(prompt, INTRODUCTION_TEMPERATURE, INTRODUCTION_MAX_TOKENS)
        except LLMError as e:
            self._logger.warning(f"Introduction generation failed, using fallback: {e}")
            return self._fallback_introduction(application, state)

    async def initialize_session(self, uuid: str, force_restart: bool = False) -> InitializeResult:
        """
        Start the interview session for an application.

        If a session with a transcript already exists it is returned
        unchanged unless ``force_restart`` is set, in which case the state
        is re-created and the transcript replaced.

        Args:
            uuid: Application UUID.
            force_restart: Discard any existing session.

        Returns:
            InitializeResult with the state and the interviewer's opening message.
        """
        async with self._lock_for(uuid):
            try:
                application = await self._load(uuid)
                existing = application.interview_state
                if existing is not None and application.interview_conversation and not force_restart:
                    self._logger.info(f"Resuming interview session {uuid} in phase {existing.current_phase.value}")
                    return InitializeResult(
                        success=True,
                        state=existing,
                        first_message=self._last_assistant_message(application),
                        progress_info=build_progress_info(existing),
                        resumed=True,
                    )

                state = create_initial_state(
                    application,
                    default_total_questions=self._settings.default_total_questions,
                    default_duration_minutes=self._settings.default_duration_minutes,
                )
                introduction = await self._generate_introduction(application, state)
                stored = await self._store.apply_update(build_start_update(application, state, introduction))
            except InterviewError as e:
                return self._failure(InitializeResult, uuid, e)

        action = "Restarted" if force_restart and existing is not None else "Started"
        self._logger.info(
            f"{action} interview session {uuid}: {state.total_questions} questions "
            f"across {list(state.max_questions_per_category)}"
        )
        stored_state = self._require_state(stored)
        return InitializeResult(
            success=True,
            state=stored_state,
            first_message=introduction,
            progress_info=build_progress_info(stored_state),
        )

    # Turns

    async def _generate_reply(
        self,
        application: ApplicationRecord,
        transition: TurnTransition,
        classification: IntentClassification,
        utterance: str,
    ) -> Interpretation:
        interpreter = self._interpreter_for(application)
        prompt = self._composer.build_turn_prompt(
            transition.state,
            application,
            application.interview_conversation,
            classification,
            utterance,
        )
        try:
            text = await self._generate(prompt, TURN_TEMPERATURE, TURN_MAX_TOKENS)
        except LLMError as e:
            self._logger.warning(f"Reply generation failed in phase {transition.phase.value}, using fallback: {e}")
            return interpreter.fallback_response(transition.phase, classification)
        return interpreter.interpret(transition.phase, text, classification)

    async def process_turn(self, uuid: str, utterance: str) -> TurnResult:
        """
        Process one candidate utterance.

        Args:
            uuid: Application UUID.
            utterance: What the candidate said.

        Returns:
            TurnResult with the interviewer's feedback and next question.
        """
        async with self._lock_for(uuid):
            try:
                application = await self._load(uuid)
                state = self._require_state(application)
                classification = self._classifier.classify(utterance)
                transition = apply_turn(state, utterance, classification, self._classifier, self._tracker)
                interpretation = await self._generate_reply(application, transition, classification, utterance)
                pending = build_turn_update(application, transition, utterance, classification, interpretation)
                stored = await self._store.apply_update(pending)
            except InterviewError as e:
                return self._failure(TurnResult, uuid, e)

        new_state = self._require_state(stored)
        if transition.category_completed:
            self._logger.info(f"Session {uuid}: completed categories {new_state.completed_categories}")
        return TurnResult(
            success=True,
            feedback=interpretation.feedback,
            next_question=interpretation.next_question,
            state=new_state,
            is_completed=new_state.current_phase == InterviewPhase.COMPLETED,
            current_phase=new_state.current_phase,
            progress_info=build_progress_info(new_state),
        )

    async def get_state(self, uuid: str) -> StateResult:
        """
        Get the stored state and transcript of a session.

        Args:
            uuid: Application UUID.

        Returns:
            StateResult with the state and the full transcript.
        """
        try:
            application = await self._load(uuid)
            state = self._require_state(application)
        except InterviewError as e:
            return self._failure(StateResult, uuid, e)
        return StateResult(success=True, state=state, transcript=application.interview_conversation)

    # Completion

    async def complete_session(self, uuid: str) -> CompletionResult:
        """
        Explicitly end a session from any phase.

        A closing message is generated and appended to the transcript and
        the application is marked completed. Completing an already
        completed session returns its last message without writing.

        Args:
            uuid: Application UUID.

        Returns:
            CompletionResult with the final message and state.
        """
        async with self._lock_for(uuid):
            try:
                application = await self._load(uuid)
                state = self._require_state(application)
                if state.current_phase == InterviewPhase.COMPLETED:
                    return CompletionResult(
                        success=True,
                        final_message=self._last_assistant_message(application),
                        state=state,
                    )

                prompt = self._composer.build_completion_prompt(application, state)
                try:
                    final_message = await self._generate(prompt, COMPLETION_TEMPERATURE, COMPLETION_MAX_TOKENS)
                except LLMError as e:
                    self._logger.warning(f"Completion message generation failed, using fallback: {e}")
                    final_message = (
                        self._interpreter_for(application).fallback_response(InterviewPhase.COMPLETED).feedback
                    )
                stored = await self._store.apply_update(
                    build_completion_update(application, state, final_message)
                )
            except InterviewError as e:
                return self._failure(CompletionResult, uuid, e)

        self._logger.info(
            f"Completed interview session {uuid} after {state.actual_questions_asked}/{state.total_questions} questions"
        )
        return CompletionResult(success=True, final_message=final_message, state=self._require_state(stored))

    async def close(self) -> None:
        """Release the LLM client's resources."""
        await self._llm_client.close()
