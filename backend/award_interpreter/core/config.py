"""
Pydantic Settings — centralized configuration loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Document store (Postgres via SQLAlchemy async) ──
    POSTGRES_USER: str = "awards_user"
    POSTGRES_PASSWORD: str = "awards_pass"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "awards_db"

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for app runtime (asyncpg)."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # ── Interpretation backend selection ─────
    # "primary" (OpenAI) or "secondary" (Gemini)
    INTERPRETATION_BACKEND: str = "primary"

    # ── Primary backend: OpenAI ──────────────
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_BASE_URL: str | None = None

    # ── Secondary backend: Google Gemini ─────
    GOOGLE_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"

    # ── Shared generation parameters ─────────
    LLM_TEMPERATURE: float = 0.1
    LLM_MAX_TOKENS: int = 3000
    LLM_TIMEOUT_SECONDS: float = 60.0

    # ── LangSmith Tracing ────────────────────
    LANGSMITH_API_KEY: str = ""
    LANGSMITH_ENDPOINT: str = "https://api.smith.langchain.com"
    LANGSMITH_PROJECT: str = "award-interpreter"
    LANGSMITH_TRACING: bool = False

    # ── Documents ────────────────────────────
    MAX_DOCUMENT_BYTES: int = 10 * 1024 * 1024

    # ── Application ───────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ["../.env", ".env"], "extra": "ignore"}


settings = Settings()
