"""
Orchestrator exception taxonomy.

Non-recoverable failures raise these; the orchestrator converts them into
``success=False`` results at its public boundary.
"""


class InterviewError(Exception):
    """Base class for interview session failures."""


class SessionNotFoundError(InterviewError):
    """The referenced application or its interview session does not exist."""

    def __init__(self, uuid: str, message: str = "Application not found") -> None:
        super().__init__(message)
        self.uuid = uuid


class SessionCompletedError(InterviewError):
    """A turn was submitted for an interview that has already completed."""


class PersistenceError(InterviewError):
    """The store could not apply an update."""


class ConcurrentUpdateError(PersistenceError):
    """Another writer updated the session since it was read."""

    def __init__(self, uuid: str, expected_version: int) -> None:
        super().__init__(
            f"Session {uuid} was modified concurrently (expected version {expected_version})"
        )
        self.uuid = uuid
        self.expected_version = expected_version
