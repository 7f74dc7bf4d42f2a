from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ..deps import get_source
from ..services.generator import QuestionSource
from ..settings import settings

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

@router.get("/health/generator")
async def generator_health(source: QuestionSource = Depends(get_source)):
    """Diagnostics only; quiz creation never waits on this."""
    return {
        "available": await source.is_available(),
        "model": settings.LLM_MODEL,
        "mock": settings.MOCK_MODE,
    }
