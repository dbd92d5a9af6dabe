from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    AI_PROVIDER: str = Field(
        default="demo",
        validation_alias=AliasChoices("AI_PROVIDER", "CORTEX_AI_PROVIDER", "AI_MODE"),
    )

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL: str = "llama3.1"
    OLLAMA_API_KEY: str | None = None

    INTENT_LLM_TEMPERATURE: float = 0.15
    INTENT_LLM_MAX_TOKENS: int = 160
    INTENT_LLM_TIMEOUT_S: float = 20.0
    INTENT_MIN_RULE_CONFIDENCE: float = 0.75

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[1].parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
