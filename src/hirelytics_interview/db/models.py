"""
SQLAlchemy models for database persistence.

Defines the database schema for job applications and their interview
transcripts.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class JobApplicationModel(Base):
    """Database model for job applications and their interview state."""

    __tablename__ = "job_applications"

    uuid: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(50), default="pending", nullable=False)
    candidate: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    job_details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    instructions_for_ai: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    session_instruction: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    preferred_language: Mapped[str | None] = mapped_column(String(50), nullable=True)
    interview_state: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Optimistic concurrency counter
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    # Relationships
    messages: Mapped[list["ConversationMessageModel"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="ConversationMessageModel.sequence",
    )


class ConversationMessageModel(Base):
    """Database model for interview transcript messages."""

    __tablename__ = "interview_messages"
    __table_args__ = (UniqueConstraint("application_uuid", "sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    application_uuid: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("job_applications.uuid"),
        nullable=False,
        index=True,
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Full message document (camelCase), including phase and question metadata
    document: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    # Relationships
    application: Mapped["JobApplicationModel"] = relationship(back_populates="messages")
