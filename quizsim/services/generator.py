from __future__ import annotations

from typing import Awaitable, Callable, Optional, Sequence

import httpx
from loguru import logger

from ..schemas import GeneratedQuestion
from ..settings import settings
from .fallback import fallback_question
from .llm import llm
from .parse import parse_question

SYSTEM_PROMPT = (
    "Return only valid JSON with no extra text. "
    "Schema: {\"question\":\"...\",\"options\":[\"A\",\"B\",\"C\",\"D\"],"
    "\"correctAnswer\":0,\"explanation\":\"...\",\"gradeLevel\":\"...\",\"curriculum\":\"...\"}. "
    "Exactly 4 options; correctAnswer is the 0-based index of the right option."
)


def build_prompt(topic: str, subtopic: Optional[str] = None, grade: Optional[str] = None,
                 curriculum: Optional[str] = None, avoid: Sequence[str] = ()) -> str:
    subject = f"{topic} ({subtopic})" if subtopic else topic
    lines = [f"Generate a unique multiple choice question about {subject}."]
    if grade:
        lines.append(f"Pitch it at this grade level: {grade}.")
    if curriculum:
        lines.append(f"Frame it according to the {curriculum} curriculum.")
    lines.append("The question should test understanding, with plausible distractors.")
    if avoid:
        lines.append("Do not repeat any of these existing questions:")
        lines.extend(f"- {q}" for q in avoid)
    return "\n".join(lines)


class QuestionSource:
    """Produces new questions from the generation backend, falling back to a fixed bank."""

    def __init__(self, complete: Callable[..., Awaitable[str]] = llm, base_url: str = settings.LLM_BASE_URL):
        self._complete = complete
        self.base_url = base_url.rstrip("/")

    async def generate(self, topic: str, subtopic: Optional[str] = None, grade: Optional[str] = None,
                       curriculum: Optional[str] = None, avoid: Sequence[str] = ()) -> GeneratedQuestion:
        prompt = build_prompt(topic, subtopic, grade, curriculum, avoid)
        try:
            raw = await self._complete(
                [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=500,
            )
            q = parse_question(raw)
        except Exception as e:
            logger.warning(f"[generator] backend failed for topic={topic!r}: {type(e).__name__}: {e}")
            return self.fallback(topic, grade, curriculum)
        return q.model_copy(update={
            "grade_level": grade or q.grade_level,
            "curriculum": curriculum or q.curriculum,
        })

    def fallback(self, topic: str, grade: Optional[str] = None,
                 curriculum: Optional[str] = None) -> GeneratedQuestion:
        return fallback_question(topic, grade, curriculum)

    async def is_available(self) -> bool:
        if settings.MOCK_MODE:
            return True
        try:
            async with httpx.AsyncClient(timeout=3) as client:
                r = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {settings.LLM_API_KEY}"},
                )
        except httpx.HTTPError as e:
            logger.info(f"[generator] backend unreachable: {e}")
            return False
        return r.status_code < 300
