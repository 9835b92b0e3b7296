"""Skill models for a user's self-reported skills and learning progress.

Skills feed the skill-gap report: each required job skill is compared against
the caller's skills by normalized name, and proficiency decides whether the
skill counts as matched or weak.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from ats.models.base import Base, TimestampMixin, utcnow


class Skill(Base, TimestampMixin):
    """A skill held by one user, with an integer proficiency level.

    Higher proficiency means a stronger skill; levels below 3 are reported as
    weak in the skill-gap report.
    """

    __tablename__ = "skills"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    proficiency: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        """String representation of Skill."""
        return f"<Skill(id={self.id}, name='{self.name}', proficiency={self.proficiency})>"


# One skill per name for each user, ignoring case
Index("uq_skills_user_lower_name", Skill.user_id, func.lower(Skill.name), unique=True)


class SkillProgress(Base):
    """Learning progress a user records against a (normalized) skill name."""

    __tablename__ = "skill_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "skill", name="uq_skill_progress_user_skill"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    skill: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SkillProgress(skill='{self.skill}', status='{self.status}')>"
