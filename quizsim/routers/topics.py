from typing import List

from fastapi import APIRouter, Depends

from ..deps import get_store
from ..schemas import TopicRecord
from ..services.store import QuestionStore

router = APIRouter()

@router.get("/topics", response_model=List[TopicRecord], response_model_exclude_none=True)
def list_topics(store: QuestionStore = Depends(get_store)):
    return store.list_topics()
