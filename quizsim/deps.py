from functools import lru_cache

from .services.generator import QuestionSource
from .services.sessions import InMemorySessionStore, SessionManager
from .services.store import QuestionStore
from .settings import settings


@lru_cache
def get_store() -> QuestionStore:
    return QuestionStore(settings.DATA_DIR)


@lru_cache
def get_source() -> QuestionSource:
    return QuestionSource()


@lru_cache
def get_manager() -> SessionManager:
    return SessionManager(InMemorySessionStore(), get_store(), get_source())
