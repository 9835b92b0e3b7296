"""Job description analysis service with Ollama integration.

Extracts the hard skills a posting asks for so the skill-gap report has
something to compare against.
"""

import logging

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.models import Job
from ats.schemas.job import ParsedJobSkills
from ats.services.llm import OllamaClient, extract_json_from_response
from ats.services.pipeline import set_required_skills

logger = logging.getLogger(__name__)

SKILL_PROMPT = """You are a job description analyzer. Extract the hard skills and return ONLY a JSON object.

Rules:
- Include programming languages, frameworks, tools, platforms, databases and certifications
- Exclude soft skills such as leadership, communication, teamwork or problem-solving
- Collapse variations to one name (e.g., "Python 3" -> "Python")

Required JSON structure:
{{
  "hard_skills": ["Skill1", "Skill2", ...]
}}

Job Title: {title}
Company: {company}

Job Description:
{description}
"""


async def extract_required_skills(job: Job, ollama: OllamaClient) -> list[str]:
    """Ask the model for the hard skills in a job posting.

    Args:
        job: Job whose description is analyzed
        ollama: Ollama client instance

    Returns:
        Skill names as returned by the model (not yet normalized)

    Raises:
        ValueError: When the job has no description or the model output
            cannot be parsed
        asyncio.TimeoutError: If Ollama times out on every attempt
    """
    if not job.description or not job.description.strip():
        raise ValueError("Job has no description to analyze")

    prompt = SKILL_PROMPT.format(
        title=job.title,
        company=job.company,
        description=job.description,
    )
    response = await ollama.generate(prompt)

    try:
        data = extract_json_from_response(response)
        parsed = ParsedJobSkills(**data)
    except (ValueError, ValidationError) as e:
        logger.error(f"Failed to parse skills for job {job.id}: {e}")
        logger.debug(f"Raw response: {response}")
        raise ValueError(f"Failed to extract skills from job description: {e}")

    logger.info(f"Extracted {len(parsed.hard_skills)} skills for job {job.id}")
    return parsed.hard_skills


async def analyze_job(
    job: Job,
    db: AsyncSession,
    ollama: OllamaClient | None = None,
) -> Job:
    """Extract a job's required skills and store them normalized.

    The model call may be retried; the database write happens once, after the
    model has answered.
    """
    ollama = ollama or OllamaClient()
    logger.info(f"Analyzing job {job.id}: {job.title} at {job.company}")

    skills = await extract_required_skills(job, ollama)
    return await set_required_skills(db, job, skills)
