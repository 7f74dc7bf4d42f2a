from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler

from .settings import settings
from .deps import get_store
from .errors import QuizError
from .routers import session, topics, health

# ---------- logging ----------
logger.remove()
logger.add(
    lambda msg: print(msg, end=""),
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level=settings.LOG_LEVEL,
)

# ---------- startup: legacy file migration in the background ----------
def _migration_done(task: asyncio.Task):
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"[migrate] failed: {type(exc).__name__}: {exc}")
    else:
        logger.info(f"[migrate] done, {task.result()} file(s) re-keyed")

@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(asyncio.to_thread(get_store().migrate))
    task.add_done_callback(_migration_done)
    app.state.migration = task
    yield

# ---------- app / limiter ----------
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
app = FastAPI(title="Quiz Simulator API", version="1.0.0", lifespan=lifespan)
app.state.limiter = limiter

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "Content-Type", "X-Requested-With"],
)

# SlowAPI middleware + handler
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------- errors ----------
@app.exception_handler(QuizError)
async def quiz_error(request: Request, exc: QuizError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

@app.exception_handler(RequestValidationError)
async def bad_request(request: Request, exc: RequestValidationError):
    fields = {str(loc) for err in exc.errors() for loc in err.get("loc", ())}
    if "answerIndex" in fields:
        detail = "Invalid answer index"
    elif "topic" in fields:
        detail = "Topic is required"
    else:
        detail = "Invalid request body"
    return JSONResponse(status_code=400, content={"detail": detail})

@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"[http] unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# ---------- routers ----------
app.include_router(session.router, tags=["session"])
app.include_router(topics.router, tags=["topics"])
app.include_router(health.router, tags=["health"])
