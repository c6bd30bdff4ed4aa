"""
Session store implementations.

A session store loads application records and applies the pending updates
produced by the orchestrator. Each update is written atomically and guarded
by the record's version counter.
"""

import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from hirelytics_interview.db.models import ConversationMessageModel, JobApplicationModel, utc_now
from hirelytics_interview.orchestrator.errors import (
    ConcurrentUpdateError,
    InterviewError,
    PersistenceError,
    SessionNotFoundError,
)
from hirelytics_interview.orchestrator.schemas import (
    ApplicationRecord,
    ConversationMessage,
    PendingUpdate,
)

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Abstract base class for session stores."""

    @abstractmethod
    async def get_application(self, uuid: str) -> ApplicationRecord | None:
        """
        Load an application with its interview state and transcript.

        Args:
            uuid: Application UUID.

        Returns:
            The application if found, None otherwise.

        Raises:
            PersistenceError: If the store cannot be read.
        """
        ...

    @abstractmethod
    async def apply_update(self, pending: PendingUpdate) -> ApplicationRecord:
        """
        Atomically apply a pending update.

        Sets the interview state and status, appends (or replaces) transcript
        messages and increments the version, all or nothing.

        Args:
            pending: The update to apply.

        Returns:
            The application as stored after the update.

        Raises:
            SessionNotFoundError: If the application does not exist.
            ConcurrentUpdateError: If the stored version differs from the expected one.
            PersistenceError: If the write fails.
        """
        ...

    @abstractmethod
    async def create_application(self, record: ApplicationRecord) -> ApplicationRecord:
        """
        Insert a new application.

        Args:
            record: Application to store.

        Returns:
            The stored application.

        Raises:
            PersistenceError: If the application exists or the write fails.
        """
        ...


class SqlAlchemySessionStore(SessionStore):
    """Session store backed by an async SQLAlchemy database."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize the store.

        Args:
            session_factory: Factory producing async sessions.
        """
        self._session_factory = session_factory

    @staticmethod
    def _to_record(model: JobApplicationModel) -> ApplicationRecord:
        return ApplicationRecord.model_validate(
            {
                "uuid": model.uuid,
                "status": model.status,
                "candidate": model.candidate,
                "job_details": model.job_details,
                "instructions_for_ai": model.instructions_for_ai,
                "session_instruction": model.session_instruction,
                "preferred_language": model.preferred_language,
                "interview_state": model.interview_state,
                "interview_conversation": [message.document for message in model.messages],
                "version": model.version,
            }
        )

    @staticmethod
    def _message_rows(
        uuid: str,
        messages: list[ConversationMessage],
        start: int,
    ) -> list[ConversationMessageModel]:
        return [
            ConversationMessageModel(
                application_uuid=uuid,
                sequence=start + offset,
                role=message.role.value,
                content=message.content,
                document=message.to_document(),
                timestamp=message.timestamp,
            )
            for offset, message in enumerate(messages)
        ]

    async def get_application(self, uuid: str) -> ApplicationRecord | None:
        """Load an application with its interview state and transcript."""
        try:
            async with self._session_factory() as session:
                model = await session.get(
                    JobApplicationModel,
                    uuid,
                    options=[selectinload(JobApplicationModel.messages)],
                )
                return self._to_record(model) if model is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load application {uuid}: {e}")
            raise PersistenceError(f"Failed to load application: {e}") from e
        except ValidationError as e:
            logger.error(f"Stored application {uuid} is malformed: {e}")
            raise PersistenceError(f"Stored application {uuid} is malformed") from e

    async def apply_update(self, pending: PendingUpdate) -> ApplicationRecord:
        """Atomically apply a pending update."""
        uuid = pending.uuid
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    stmt = (
                        update(JobApplicationModel)
                        .where(
                            JobApplicationModel.uuid == uuid,
                            JobApplicationModel.version == pending.expected_version,
                        )
                        .values(
                            interview_state=pending.state.to_document(),
                            status=pending.status.value,
                            version=JobApplicationModel.version + 1,
                            updated_at=utc_now(),
                        )
                        .execution_options(synchronize_session=False)
                    )
                    result = await session.execute(stmt)
                    if result.rowcount != 1:
                        exists = await session.scalar(
                            select(JobApplicationModel.uuid).where(JobApplicationModel.uuid == uuid)
                        )
                        if exists is None:
                            raise SessionNotFoundError(uuid)
                        raise ConcurrentUpdateError(uuid, pending.expected_version)

                    if pending.replace_conversation:
                        await session.execute(
                            delete(ConversationMessageModel).where(
                                ConversationMessageModel.application_uuid == uuid
                            )
                        )
                        start = 0
                    else:
                        last = await session.scalar(
                            select(func.max(ConversationMessageModel.sequence)).where(
                                ConversationMessageModel.application_uuid == uuid
                            )
                        )
                        start = 0 if last is None else last + 1

                    session.add_all(self._message_rows(uuid, pending.append_messages, start))
        except InterviewError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"Failed to update application {uuid}: {e}")
            raise PersistenceError(f"Failed to update application: {e}") from e

        record = await self.get_application(uuid)
        if record is None:
            raise SessionNotFoundError(uuid)
        return record

    async def create_application(self, record: ApplicationRecord) -> ApplicationRecord:
        """Insert a new application."""
        model = JobApplicationModel(
            uuid=record.uuid,
            status=record.status.value,
            candidate=record.candidate.to_document(),
            job_details=record.job_details.to_document(),
            instructions_for_ai=record.instructions_for_ai.to_document(),
            session_instruction=record.session_instruction.to_document(),
            preferred_language=record.preferred_language,
            interview_state=record.interview_state.to_document() if record.interview_state else None,
            version=record.version,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(model)
                    session.add_all(self._message_rows(record.uuid, record.interview_conversation, 0))
        except IntegrityError as e:
            raise PersistenceError(f"Application {record.uuid} already exists") from e
        except SQLAlchemyError as e:
            logger.error(f"Failed to create application {record.uuid}: {e}")
            raise PersistenceError(f"Failed to create application: {e}") from e

        logger.info(f"Created application {record.uuid}")
        stored = await self.get_application(record.uuid)
        if stored is None:
            raise PersistenceError(f"Application {record.uuid} was not stored")
        return stored


class InMemorySessionStore(SessionStore):
    """
    Dictionary-backed session store.

    Records are copied on the way in and out, so callers never share
    mutable state with the store.
    """

    def __init__(self, records: list[ApplicationRecord] | None = None) -> None:
        self._records: dict[str, ApplicationRecord] = {}
        for record in records or []:
            self._records[record.uuid] = record.model_copy(deep=True)

    async def get_application(self, uuid: str) -> ApplicationRecord | None:
        record = self._records.get(uuid)
        return record.model_copy(deep=True) if record is not None else None

    async def apply_update(self, pending: PendingUpdate) -> ApplicationRecord:
        current = self._records.get(pending.uuid)
        if current is None:
            raise SessionNotFoundError(pending.uuid)
        if current.version != pending.expected_version:
            raise ConcurrentUpdateError(pending.uuid, pending.expected_version)

        existing = [] if pending.replace_conversation else current.interview_conversation
        updated = current.model_copy(
            update={
                "interview_state": pending.state.model_copy(deep=True),
                "status": pending.status,
                "interview_conversation": [m.model_copy() for m in existing + pending.append_messages],
                "version": current.version + 1,
            },
            deep=True,
        )
        self._records[pending.uuid] = updated
        return updated.model_copy(deep=True)

    async def create_application(self, record: ApplicationRecord) -> ApplicationRecord:
        if record.uuid in self._records:
            raise PersistenceError(f"Application {record.uuid} already exists")
        self._records[record.uuid] = record.model_copy(deep=True)
        logger.info(f"Created application {record.uuid}")
        return record.model_copy(deep=True)
