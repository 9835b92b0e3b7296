"""Database models for the job pipeline tracker."""

from .base import Base
from .job import ApplicationEvent, Job
from .skill import Skill, SkillProgress

__all__ = [
    "Base",
    "Job",
    "ApplicationEvent",
    "Skill",
    "SkillProgress",
]
