"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.enums import DecisionMode, LLMProviderName


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Database
    DATABASE_URL: str

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Decisioning
    DECISION_MODE: DecisionMode = DecisionMode.RULES
    SEED_DEFAULT_RULES: bool = True

    # LLM Configuration
    LLM_ENABLED: bool = False
    LLM_PROVIDER: LLMProviderName = LLMProviderName.OPENAI
    LLM_MODEL: str = "gpt-4"
    LLM_RULES_ENABLED: Optional[bool] = None
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: Optional[str] = None
    OLLAMA_BASE_URL: str = "http://localhost:11434"

    # External collaborators
    EXPERIAN_URL: str = "http://localhost:8083/api/experian"
    EQUIFAX_URL: str = "http://localhost:8084/api/equifax"
    AUDIT_URL: str = "http://localhost:8085/api/audit"
    HTTP_TIMEOUT_SECONDS: float = 5.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def rule_inference_enabled(self) -> bool:
        """Rule inference follows LLM_ENABLED unless explicitly configured."""
        if self.LLM_RULES_ENABLED is None:
            return self.LLM_ENABLED
        return self.LLM_RULES_ENABLED


# Global settings instance
settings = Settings()
