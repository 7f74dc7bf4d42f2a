from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from .settings import settings


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeneratedQuestion(CamelModel):
    """Payload expected back from the generation backend."""
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(ge=0, le=3)
    explanation: str = ""
    grade_level: Optional[str] = None
    curriculum: Optional[str] = None


class Question(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: int = Field(ge=0, le=3)
    explanation: Optional[str] = None
    grade_level: Optional[str] = None
    curriculum: Optional[str] = None


class QuizSession(CamelModel):
    id: str
    topic: str
    subtopic: Optional[str] = None
    grade_level: str
    curriculum: Optional[str] = None
    questions: List[Question]
    current_question_index: int = 0
    answers: Dict[str, int] = Field(default_factory=dict)
    score: int = 0
    total_questions: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TopicRecord(CamelModel):
    topic: str
    subtopic: Optional[str] = None
    question_count: int


class CreateSessionRequest(CamelModel):
    topic: str
    subtopic: Optional[str] = None
    grade_level: Optional[str] = None
    curriculum: Optional[str] = None
    question_count: int = Field(default_factory=lambda: settings.DEFAULT_QUESTION_COUNT, ge=1)

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Topic is required")
        return v

    @field_validator("question_count")
    @classmethod
    def _count_capped(cls, v: int) -> int:
        if v > settings.MAX_QUESTION_COUNT:
            raise ValueError(f"questionCount must be at most {settings.MAX_QUESTION_COUNT}")
        return v


class AnswerRequest(CamelModel):
    question_id: str
    answer_index: StrictInt = Field(ge=0, le=3)


class AnswerResult(CamelModel):
    is_correct: bool


class SessionResults(CamelModel):
    score: int
    total: int
    percentage: int
