from fastapi import APIRouter, Depends

from ..deps import get_manager
from ..schemas import AnswerRequest, AnswerResult, CreateSessionRequest, Question, QuizSession, SessionResults
from ..services.sessions import SessionManager

router = APIRouter()

# Handlers are async on purpose: the manager calls below have no await points, so
# answer/next requests for one session run one at a time on the event loop.

@router.post("/session", response_model=QuizSession)
async def create_session(body: CreateSessionRequest, manager: SessionManager = Depends(get_manager)):
    return await manager.create_session(
        body.topic, body.subtopic, body.grade_level, body.curriculum, body.question_count
    )

@router.get("/session/{session_id}", response_model=QuizSession)
async def get_session(session_id: str, manager: SessionManager = Depends(get_manager)):
    return manager.get_session(session_id)

@router.get("/session/{session_id}/current", response_model=Question)
async def current_question(session_id: str, manager: SessionManager = Depends(get_manager)):
    return manager.get_current_question(session_id)

@router.post("/session/{session_id}/answer", response_model=AnswerResult)
async def submit_answer(session_id: str, body: AnswerRequest, manager: SessionManager = Depends(get_manager)):
    ok = manager.submit_answer(session_id, body.question_id, body.answer_index)
    return AnswerResult(is_correct=ok)

@router.post("/session/{session_id}/next", response_model=Question)
async def next_question(session_id: str, manager: SessionManager = Depends(get_manager)):
    return manager.advance(session_id)

@router.get("/session/{session_id}/results", response_model=SessionResults)
async def results(session_id: str, manager: SessionManager = Depends(get_manager)):
    return manager.results(session_id)
