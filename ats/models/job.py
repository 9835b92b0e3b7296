"""Job model for tracked applications and their stage history."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, utcnow


class Job(Base, TimestampMixin):
    """One job application tracked through the pipeline."""

    __tablename__ = "jobs"

    # Primary Key - UUID
    id: Mapped[UUID] = mapped_column(
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Owner (verified caller identity from the bearer token)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Posting Information
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    salary_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    salary_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deadline: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    applied_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Lowercased, trimmed skill names (filled on create or by analysis)
    required_skills: Mapped[Optional[list[str]]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )

    # Free-text tracking fields
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    salary_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    interview_feedback: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Pipeline stage
    status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="Interested",
        index=True,
    )
    status_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=True,
    )

    # Relationships
    history: Mapped[List["ApplicationEvent"]] = relationship(
        back_populates="job",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="desc(ApplicationEvent.timestamp)",
        lazy="selectin",  # Async-friendly eager loading
    )

    def __repr__(self) -> str:
        return f"<Job(title='{self.title}', company='{self.company}', status='{self.status}')>"


class ApplicationEvent(Base):
    """Audit entry written whenever a job changes stage."""

    __tablename__ = "application_history"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    job_id: Mapped[UUID] = mapped_column(
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    event: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    job: Mapped["Job"] = relationship(back_populates="history")

    def __repr__(self) -> str:
        return f"<ApplicationEvent(job_id={self.job_id}, event='{self.event}')>"
