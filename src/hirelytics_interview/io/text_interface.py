"""
Text-based interview interface.

Provides a command-line REPL that drives one interview session through the
orchestrator.
"""

from hirelytics_interview.orchestrator.interview_orchestrator import InterviewOrchestrator
from hirelytics_interview.orchestrator.schemas import InterviewPhase, ProgressInfo

EXIT_COMMANDS = ("quit", "exit", "end")


class TextInterface:
    """
    Command-line text interface for interviews.

    Provides a simple REPL for conducting an interview via terminal.
    Typing ``quit``, ``exit`` or ``end`` completes the session early.
    """

    def __init__(
        self,
        orchestrator: InterviewOrchestrator,
        uuid: str,
        force_restart: bool = False,
    ) -> None:
        """
        Initialize the text interface.

        Args:
            orchestrator: Interview orchestrator to use.
            uuid: Application UUID of the session to run.
            force_restart: Discard any existing session before starting.
        """
        self._orchestrator = orchestrator
        self._uuid = uuid
        self._force_restart = force_restart

    async def run(self) -> bool:
        """
        Run the interactive interview session.

        Returns:
            True if the session ran to completion, False on failure.
        """
        print("\n" + "=" * 60)
        print("Welcome to the Hirelytics Interview System")
        print("=" * 60 + "\n")

        started = await self._orchestrator.initialize_session(self._uuid, force_restart=self._force_restart)
        if not started.success:
            print(f"Could not start the interview: {started.error}")
            return False
        if started.state and started.state.current_phase == InterviewPhase.COMPLETED:
            print("This interview has already been completed.")
            return True
        if started.resumed:
            print("Resuming your interview where you left off.")
        await self.send_message(f"Interviewer: {started.first_message}")
        if started.progress_info:
            self._print_progress(started.progress_info)

        while True:
            candidate_input = await self.receive_input()

            if candidate_input.strip().lower() in EXIT_COMMANDS:
                print("\nEnding interview...")
                completed = await self._orchestrator.complete_session(self._uuid)
                if not completed.success:
                    print(f"Could not complete the interview: {completed.error}")
                    return False
                await self.send_message(f"Interviewer: {completed.final_message}")
                return True

            if not candidate_input.strip():
                continue

            turn = await self._orchestrator.process_turn(self._uuid, candidate_input)
            if not turn.success:
                print(f"Error: {turn.error}")
                continue

            reply = " ".join(part for part in (turn.feedback, turn.next_question) if part)
            await self.send_message(f"Interviewer: {reply}")
            if turn.is_completed:
                print("The interview is complete. Thank you!")
                return True
            if turn.progress_info:
                self._print_progress(turn.progress_info)

    async def send_message(self, message: str) -> None:
        """
        Display a message to the terminal.

        Args:
            message: Message to display.
        """
        print(f"\n{message}\n")

    async def receive_input(self) -> str:
        """
        Get input from the terminal.

        Returns:
            User's input string.
        """
        try:
            return input("You: ")
        except EOFError:
            return "exit"

    @staticmethod
    def _print_progress(progress: ProgressInfo) -> None:
        category = progress.current_category or "-"
        print(f"[{progress.current_question}/{progress.total_questions} questions | category: {category}]")
