from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    # Generation backend (any OpenAI-compatible endpoint; Ollama by default)
    LLM_BASE_URL: str = "http://localhost:11434/v1"
    LLM_API_KEY: str = "ollama"
    LLM_MODEL: str = "gemma3n:e2b"
    LLM_TIMEOUT: float = 30.0
    MOCK_MODE: bool = False

    # Performance knobs
    CONCURRENCY: int = 4

    # Safety/abuse knobs
    RATE_LIMIT: str = "60/minute"
    RATE_LIMIT_ENABLED: bool = True

    # Question cache
    DATA_DIR: str = "data/questions"

    # Quiz defaults
    DEFAULT_QUESTION_COUNT: int = 5
    MAX_QUESTION_COUNT: int = 20
    DEFAULT_GRADE_LEVEL: str = "general"
    AVOID_PROMPTS: int = 10

    # CORS
    ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    # Optional extra frontend
    FRONTEND_ORIGIN: str | None = None

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
if settings.FRONTEND_ORIGIN:
    settings.ALLOW_ORIGINS.append(settings.FRONTEND_ORIGIN)
