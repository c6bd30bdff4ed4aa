"""
Prompt composer agent.

Builds the natural-language prompts sent to the language model for the
session introduction, each candidate turn, and the explicit completion
message. Prompts are pure functions of their inputs: no timestamps or
random values are embedded, so identical inputs give identical prompts.
"""

from __future__ import annotations

from hirelytics_interview.agents.intent_classifier import IntentClassification
from hirelytics_interview.orchestrator.budget_tracker import remaining_categories
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    ConversationMessage,
    InterviewPhase,
    InterviewState,
)

DEFAULT_ASSISTANT_NAME = "Hirelytics AI"
DEFAULT_HISTORY_WINDOW = 10

# Number of skills named where the prompt should stay short.
KEY_SKILL_COUNT = 3

JSON_REPLY_FORMAT = """Respond in JSON only:
{
  "feedback": "Brief, specific feedback on the candidate's latest response",
  "nextQuestion": "The next thing you say to the candidate"
}"""


class PromptComposer:
    """
    Composes phase-aware prompts for the interviewer model.
    """

    INTRODUCTION_PROMPT = """You are {assistant} conducting a professional interview. Create a warm, welcoming introduction.

CONTEXT:
- Candidate: {candidate}
- Role: {job_title}
- Skills Focus: {key_skills}
- Questions: {total_questions}
- Duration: {duration} minutes
- Categories: {categories}
{language_line}
Create an introduction that:
1. Introduces yourself as {assistant}
2. Welcomes the candidate by name
3. States the specific job title
4. Mentions the structure ({total_questions} questions across {categories})
5. Asks for their brief introduction

Be warm, professional, and encouraging. Use the actual job data, never placeholders. Keep it concise (3-4 sentences)."""

    TURN_PROMPT = """You are {assistant} conducting a professional interview for the {job_title} position.

CONTEXT:
- Candidate: {candidate}
- Role: {job_title}
- Key Skills: {skills}
- Interview Progress: {progress} questions
- Current Phase: {phase}
- Clarification Requests: {clarifications}
{language_line}{recruiter_line}
{instructions}

CONVERSATION HISTORY:
{history}

LATEST USER RESPONSE: "{utterance}"

{respond_with}

Be professional, encouraging, and conversational. Keep responses concise and relevant.
{reply_format}"""

    COMPLETION_PROMPT = """You are {assistant} and have just finished an interview for the {job_title} position.

CONTEXT:
- Candidate: {candidate}
- Role: {job_title}
- Key Skills: {key_skills}
- Questions Answered: {progress}
{language_line}
Write a closing message that:
1. Thanks {candidate} sincerely for their time
2. Confirms the interview has concluded
3. Explains that the hiring team will review the interview and be in touch with next steps
4. Wishes them well

Keep it warm and concise (3-4 sentences). Respond with the message only."""

    def __init__(
        self,
        assistant_name: str = DEFAULT_ASSISTANT_NAME,
        history_window: int = DEFAULT_HISTORY_WINDOW,
    ) -> None:
        """
        Initialize the prompt composer.

        Args:
            assistant_name: Name the interviewer uses for itself.
            history_window: Maximum number of recent messages embedded in a prompt.
        """
        self._assistant = assistant_name
        self._history_window = max(1, history_window)

    @property
    def history_window(self) -> int:
        """Get the conversation window size."""
        return self._history_window

    # Context helpers

    @staticmethod
    def _job_title(application: ApplicationRecord) -> str:
        return application.job_details.title or "position"

    @staticmethod
    def _candidate_name(application: ApplicationRecord) -> str:
        return application.candidate.name or "Candidate"

    @staticmethod
    def _skills(application: ApplicationRecord, limit: int | None = None) -> str:
        skills = application.job_details.skills[:limit] if limit else application.job_details.skills
        return ", ".join(skills) if skills else "relevant skills"

    @staticmethod
    def _language_line(application: ApplicationRecord) -> str:
        if not application.preferred_language:
            return ""
        return f"- Interview Language: conduct the conversation in {application.preferred_language}\n"

    @staticmethod
    def _recruiter_line(application: ApplicationRecord) -> str:
        instruction = application.instructions_for_ai.instruction.strip()
        return f"- Recruiter Instructions: {instruction}\n" if instruction else ""

    @staticmethod
    def _progress(state: InterviewState) -> str:
        return f"{state.actual_questions_asked}/{state.total_questions}"

    def window(self, conversation: list[ConversationMessage]) -> list[ConversationMessage]:
        """Get the trailing slice of the transcript used as prompt context."""
        return conversation[-self._history_window :]

    def format_history(self, conversation: list[ConversationMessage]) -> str:
        """Render the conversation window as role-prefixed lines."""
        lines = [f"{message.role.value}: {message.content}" for message in self.window(conversation)]
        return "\n".join(lines) if lines else "(No prior conversation)"

    # Phase instructions

    def _questions_instructions(
        self,
        state: InterviewState,
        application: ApplicationRecord,
    ) -> str:
        category = state.current_category or "general"
        asked = state.questions_asked_by_category.get(category, 0)
        limit = state.max_questions_per_category.get(category, 1)
        lines = [
            "STRUCTURED QUESTIONS PHASE:",
            f"- Progress: {self._progress(state)} questions completed",
            f"- Current Category: {category}",
            f"- Category Progress: {asked}/{limit} questions in this category",
            f"- Difficulty Level: {application.instructions_for_ai.difficulty_level}",
            "- Provide brief feedback on their answer (1-2 sentences)",
            f"- Ask the next question for category: {category}",
            f"- Make questions specific to the {self._job_title(application)} role, "
            f"drawing on: {self._skills(application, KEY_SKILL_COUNT)}",
        ]
        predefined = [q.question for q in application.instructions_for_ai.questions if q.type == category]
        if predefined:
            lines.append(
                "- Prefer these predefined questions for this category, in order, "
                "adapted naturally to the conversation: " + "; ".join(predefined)
            )
        return "\n".join(lines)

    def phase_instructions(
        self,
        state: InterviewState,
        application: ApplicationRecord,
        classification: IntentClassification,
    ) -> str:
        """
        Select the instruction block for the state's phase.

        Args:
            state: State after this turn's transition.
            application: Application record for job context.
            classification: Classifier output for the latest utterance.

        Returns:
            Phase-specific instructions.
        """
        phase = state.current_phase
        job_title = self._job_title(application)

        if phase == InterviewPhase.INTRODUCTION:
            return (
                "INTRODUCTION PHASE: Welcome the candidate warmly and ask them to "
                "introduce themselves."
            )

        if phase == InterviewPhase.CANDIDATE_INTRO:
            if classification.is_clarification:
                return (
                    "CLARIFICATION: The candidate asked for clarification. Politely rephrase "
                    "your request for their introduction in different words."
                )
            return (
                "CANDIDATE INTRODUCTION COMPLETE: Acknowledge their background warmly, connect it "
                f"to the {job_title} role, and transition to the structured interview questions. "
                f"Current category: {state.current_category or 'general'}"
            )

        if phase == InterviewPhase.QUESTIONS:
            if classification.is_clarification:
                return (
                    "CLARIFICATION REQUEST: The candidate needs clarification. Rephrase your last "
                    "question in different, simpler words. Do not move on to a new question and do "
                    "not advance the question count."
                )
            return self._questions_instructions(state, application)

        if phase == InterviewPhase.FINAL_QUESTIONS:
            if classification.is_final_questions_request:
                return (
                    "FINAL QUESTIONS PHASE: The candidate wants to ask questions. Encourage them and "
                    "answer their questions about the role, company, or process."
                )
            return (
                "FINAL QUESTIONS OFFER: All structured questions are complete. Ask the candidate if "
                "they have any questions for you about the role, company, or process. Be encouraging "
                "and supportive."
            )

        # Closing and completed both end the conversation.
        return (
            "CLOSING PHASE: Provide a warm, professional closing. Thank them for their time, "
            f"highlight their strengths for the {job_title} role, and explain next steps."
        )

    # Prompts

    def build_introduction_prompt(
        self,
        application: ApplicationRecord,
        state: InterviewState,
    ) -> str:
        """
        Build the prompt for the opening message of a session.

        Args:
            application: Application record for job context.
            state: Freshly created interview state.

        Returns:
            Prompt text.
        """
        categories = ", ".join(state.max_questions_per_category) or "various areas"
        duration = application.session_instruction.duration
        if duration is None and state.estimated_completion is not None:
            duration = int((state.estimated_completion - state.started_at).total_seconds() // 60)
        return self.INTRODUCTION_PROMPT.format(
            assistant=self._assistant,
            candidate=self._candidate_name(application),
            job_title=self._job_title(application),
            key_skills=self._skills(application, KEY_SKILL_COUNT),
            total_questions=state.total_questions,
            duration=duration,
            categories=categories,
            language_line=self._language_line(application),
        )

    def build_turn_prompt(
        self,
        state: InterviewState,
        application: ApplicationRecord,
        conversation: list[ConversationMessage],
        classification: IntentClassification,
        utterance: str,
    ) -> str:
        """
        Build the prompt for replying to a candidate turn.

        Args:
            state: State after this turn's transition.
            application: Application record for job and candidate context.
            conversation: Transcript before this turn (windowed here).
            classification: Classifier output for the utterance.
            utterance: Latest candidate utterance.

        Returns:
            Prompt text.
        """
        ends_conversation = state.current_phase in (InterviewPhase.CLOSING, InterviewPhase.COMPLETED)
        if classification.is_clarification:
            respond_with = "RESPOND WITH CLARIFICATION: Politely rephrase or clarify your previous message."
        elif ends_conversation:
            respond_with = "RESPOND WITH: A complete closing message with thanks and next steps, not a question."
        else:
            respond_with = "RESPOND WITH: Brief feedback (if applicable) + the next question or message."

        return self.TURN_PROMPT.format(
            assistant=self._assistant,
            job_title=self._job_title(application),
            candidate=self._candidate_name(application),
            skills=self._skills(application),
            progress=self._progress(state),
            phase=state.current_phase.value,
            clarifications=state.clarification_requests,
            language_line=self._language_line(application),
            recruiter_line=self._recruiter_line(application),
            instructions=self.phase_instructions(state, application, classification),
            history=self.format_history(conversation),
            utterance=utterance,
            respond_with=respond_with,
            reply_format="" if ends_conversation else JSON_REPLY_FORMAT,
        )

    def build_completion_prompt(
        self,
        application: ApplicationRecord,
        state: InterviewState,
    ) -> str:
        """Build the prompt for the final message of an explicitly completed session."""
        return self.COMPLETION_PROMPT.format(
            assistant=self._assistant,
            job_title=self._job_title(application),
            candidate=self._candidate_name(application),
            key_skills=self._skills(application, KEY_SKILL_COUNT),
            progress=f"{self._progress(state)} (remaining categories: "
            f"{', '.join(remaining_categories(state)) or 'none'})",
            language_line=self._language_line(application),
        )
