from __future__ import annotations

import asyncio
import math
import random
import uuid
from typing import Dict, List, Optional, Protocol

from loguru import logger

from ..errors import QuestionNotFound, QuizExhausted, QuizValidationError, SessionNotFound
from ..schemas import Question, QuizSession, SessionResults
from ..settings import settings
from .generator import QuestionSource
from .keys import normalize
from .store import QuestionStore


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[QuizSession]: ...
    def put(self, session: QuizSession) -> None: ...
    def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-lifetime session map. Nothing is ever evicted."""

    def __init__(self):
        self._sessions: Dict[str, QuizSession] = {}

    def get(self, session_id: str) -> Optional[QuizSession]:
        return self._sessions.get(session_id)

    def put(self, session: QuizSession) -> None:
        self._sessions[session.id] = session

    def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


def percentage(score: int, total: int) -> int:
    # half-up, not banker's rounding
    return math.floor(100 * score / total + 0.5) if total else 0


class SessionManager:
    def __init__(self, sessions: SessionStore, questions: QuestionStore, source: QuestionSource,
                 concurrency: int = settings.CONCURRENCY, rng: Optional[random.Random] = None):
        self.sessions = sessions
        self.questions = questions
        self.source = source
        self.concurrency = max(1, concurrency)
        self._rng = rng or random.Random()

    async def create_session(self, topic: str, subtopic: Optional[str] = None, grade: Optional[str] = None,
                             curriculum: Optional[str] = None,
                             count: int = settings.DEFAULT_QUESTION_COUNT) -> QuizSession:
        if not normalize(topic):
            raise QuizValidationError("Topic is required")
        if count < 1:
            raise QuizValidationError("questionCount must be at least 1")
        topic = topic.strip()
        subtopic = (subtopic or "").strip() or None
        curriculum = (curriculum or "").strip() or None
        grade = (grade or "").strip() or settings.DEFAULT_GRADE_LEVEL

        stored = self.questions.fetch_questions(topic, subtopic, grade, curriculum)[:count]
        missing = count - len(stored)
        avoid = [q.question for q in stored][:settings.AVOID_PROMPTS]
        logger.info(f"[session] topic={topic!r} grade={grade!r} stored={len(stored)} generating={missing}")

        sem = asyncio.Semaphore(self.concurrency)

        async def one(i: int) -> Question:
            async with sem:
                try:
                    g = await self.source.generate(topic, subtopic, grade, curriculum, avoid=avoid)
                except Exception as e:
                    logger.warning(f"[session] source raised, using fallback: {type(e).__name__}: {e}")
                    g = self.source.fallback(topic, grade, curriculum)
            q = Question(id=f"new{i}", **g.model_dump())
            self.questions.save_question(topic, subtopic, grade, curriculum, q)
            return q

        fresh: List[Question] = list(await asyncio.gather(*(one(i) for i in range(missing))))

        pool = (stored + fresh)[:count]
        self._rng.shuffle(pool)
        questions = [q.model_copy(update={"id": f"q{i}"}) for i, q in enumerate(pool, start=1)]

        session = QuizSession(
            id=uuid.uuid4().hex,
            topic=topic,
            subtopic=subtopic,
            grade_level=grade,
            curriculum=curriculum,
            questions=questions,
            total_questions=len(questions),
        )
        self.sessions.put(session)
        logger.info(f"[session] created {session.id} with {len(questions)} questions")
        return session

    def get_session(self, session_id: str) -> QuizSession:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def get_current_question(self, session_id: str) -> Question:
        session = self.get_session(session_id)
        if session.current_question_index >= len(session.questions):
            raise QuizExhausted(session_id)
        return session.questions[session.current_question_index]

    def submit_answer(self, session_id: str, question_id: str, answer_index: int) -> bool:
        session = self.get_session(session_id)
        if isinstance(answer_index, bool) or not isinstance(answer_index, int) or not 0 <= answer_index <= 3:
            raise QuizValidationError("Invalid answer index")
        question = next((q for q in session.questions if q.id == question_id), None)
        if question is None:
            raise QuestionNotFound(question_id)

        # a resubmission replaces the earlier answer; score is derived, never accumulated
        session.answers[question_id] = answer_index
        session.score = sum(1 for q in session.questions if session.answers.get(q.id) == q.correct_answer)
        self.sessions.put(session)
        return answer_index == question.correct_answer

    def advance(self, session_id: str) -> Question:
        session = self.get_session(session_id)
        session.current_question_index = min(session.current_question_index + 1, session.total_questions)
        self.sessions.put(session)
        return self.get_current_question(session_id)

    def results(self, session_id: str) -> SessionResults:
        session = self.get_session(session_id)
        return SessionResults(
            score=session.score,
            total=session.total_questions,
            percentage=percentage(session.score, session.total_questions),
        )
