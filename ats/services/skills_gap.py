"""Skill-gap analysis between a user's skills and a job's required skills.

Required skills are classified as matched, weak (proficiency below 3) or
missing, and every gap gets a 1-5 priority built from three components:

    level gap     0-3  (3 when the skill is missing)
    demand        0-2  (2 for skills on the high-demand list)
    importance    0-2  (a constant 1 until postings carry per-skill weights)

The 0-7 total is rescaled to 1-5 with ``min(5, ceil(total / 7 * 5))``.
Matched skills always get priority 1.
"""

import copy
import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Iterable, Literal
from urllib.parse import quote_plus

logger = logging.getLogger(__name__)

HIGH_DEMAND_SKILLS = frozenset({"python", "javascript", "sql", "react", "aws"})
WEAK_LEVEL_THRESHOLD = 3
MAX_LEVEL_GAP = 3
DEMAND_BONUS = 2
# Per-job importance data does not exist yet; every required skill counts once.
ASSUMED_IMPORTANCE = 1
MAX_SCORE = MAX_LEVEL_GAP + DEMAND_BONUS + 2
MAX_PRIORITY = 5
MATCHED_PRIORITY = 1

SKILL_PLACEHOLDER = "SKILL_NAME"
DEFAULT_RESOURCE_KEY = "default"
BUNDLED_RESOURCES_PATH = Path(__file__).resolve().parent.parent / "data" / "learning_resources.json"

GapStatus = Literal["matched", "weak", "missing"]


def normalize_skill(name: str | None) -> str:
    """Lowercase and trim a skill name; comparisons use this form only."""
    return (name or "").strip().lower()


def calculate_priority(skill: str, user_level: int | None) -> int:
    """Priority (1-5) for closing the gap on a required skill.

    Args:
        skill: Skill name (normalized before the demand lookup)
        user_level: The user's proficiency, or None when the skill is missing

    Returns:
        Integer priority between 1 and 5

    Examples:
        >>> calculate_priority("terraform", None)
        3
        >>> calculate_priority("python", None)
        5
    """
    if user_level is None:
        score = MAX_LEVEL_GAP
    else:
        score = max(0, MAX_LEVEL_GAP - user_level)

    if normalize_skill(skill) in HIGH_DEMAND_SKILLS:
        score += DEMAND_BONUS

    score += ASSUMED_IMPORTANCE

    # ceil(score / 7 * 5) in integer arithmetic
    scaled = -(-score * MAX_PRIORITY // MAX_SCORE)
    return min(MAX_PRIORITY, scaled)


@dataclass
class UserSkillLevel:
    name: str
    level: int


@dataclass
class SkillLevel:
    skill: str
    level: int


@dataclass
class PriorityEntry:
    skill: str
    status: GapStatus
    current_level: int
    priority: int


@dataclass
class SkillGap:
    """Result of comparing a user's skills with a job's requirements."""

    matched: list[SkillLevel] = field(default_factory=list)
    weak: list[SkillLevel] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    priority_list: list[PriorityEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_gap(
    user_skills: Iterable[UserSkillLevel],
    required_skills: Iterable[str],
) -> SkillGap:
    """Classify each required skill and build the sorted priority list.

    Names on both sides are normalized; matching is exact on the normalized
    form. The priority list is sorted by descending priority and keeps the
    required-skill order among ties.
    """
    levels: dict[str, int] = {}
    for user_skill in user_skills:
        # First entry wins when a user holds duplicates of a skill
        levels.setdefault(normalize_skill(user_skill.name), user_skill.level or 0)

    gap = SkillGap()
    for raw in required_skills:
        skill = normalize_skill(raw)
        if not skill:
            continue

        level = levels.get(skill)
        if level is None:
            gap.missing.append(skill)
            gap.priority_list.append(
                PriorityEntry(skill, "missing", 0, calculate_priority(skill, None))
            )
        elif level < WEAK_LEVEL_THRESHOLD:
            gap.weak.append(SkillLevel(skill, level))
            gap.priority_list.append(
                PriorityEntry(skill, "weak", level, calculate_priority(skill, level))
            )
        else:
            gap.matched.append(SkillLevel(skill, level))
            gap.priority_list.append(
                PriorityEntry(skill, "matched", level, MATCHED_PRIORITY)
            )

    gap.priority_list.sort(key=lambda entry: entry.priority, reverse=True)
    return gap


class LearningResources:
    """Static lookup of learning resources keyed by normalized skill name.

    Unknown skills fall back to the ``default`` entry, whose string values
    have the literal ``SKILL_NAME`` replaced by the skill (URL-encoded in
    the ``url`` value).
    """

    def __init__(self, table: dict[str, list[dict[str, Any]]]):
        self.table = {normalize_skill(key): value for key, value in table.items()}

    @classmethod
    def from_file(cls, path: str | Path | None = None) -> "LearningResources":
        """Load the resource table from JSON.

        A missing or unreadable file yields an empty table so the gap report
        still works, just without resources.
        """
        path = Path(path) if path else BUNDLED_RESOURCES_PATH
        try:
            with open(path, "r", encoding="utf-8") as f:
                table = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load learning resources from {path}: {e}")
            table = {}
        return cls(table)

    def for_skill(self, skill: str) -> list[dict[str, Any]]:
        key = normalize_skill(skill)
        if key in self.table and key != DEFAULT_RESOURCE_KEY:
            return copy.deepcopy(self.table[key])

        template = self.table.get(DEFAULT_RESOURCE_KEY)
        if not template:
            return []
        # URLs get the encoded name; other strings get it verbatim
        encoded = quote_plus(key)
        return [
            {
                name: value.replace(SKILL_PLACEHOLDER, encoded if name == "url" else key)
                if isinstance(value, str) else value
                for name, value in resource.items()
            }
            for resource in template
        ]

    def for_skills(self, skills: Iterable[str]) -> dict[str, list[dict[str, Any]]]:
        return {normalize_skill(skill): self.for_skill(skill) for skill in skills if normalize_skill(skill)}
