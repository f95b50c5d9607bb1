"""Configuration management for HRFlow Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # Sandboxed environments may not expose .env; rely on the process env
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # OpenAI configuration (required)
    OPENAI_API_KEY: str = Field(..., description="OpenAI API key")

    # Environment
    HRFLOW_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Embedding configuration
    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small", description="OpenAI embedding model"
    )
    EMBEDDING_DIM: int = Field(default=1536, description="Embedding vector dimension")

    # Chatbot (RAG) configuration
    CHAT_MODEL: str = Field(default="gpt-4-turbo-preview", description="Model for HR answers")
    CHAT_TEMPERATURE: float = Field(default=0.3, description="Low temperature for factual answers")
    CHAT_MAX_TOKENS: int = Field(default=1000, description="Max tokens per answer")
    RAG_SIMILARITY_THRESHOLD: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for a policy to be used as context",
    )
    RAG_MAX_POLICIES: int = Field(default=3, ge=1, description="Max policies per answer")
    MAX_QUESTION_CHARS: int = Field(default=500, description="Max characters per question")
    CHAT_HISTORY_DEFAULT_LIMIT: int = Field(default=10, description="Default history page size")

    # Contract generation configuration
    CONTRACT_MODEL: str = Field(
        default="gpt-4-turbo-preview", description="Model for contract drafting"
    )
    CONTRACT_TEMPERATURE: float = Field(default=0.3, description="Contract drafting temperature")
    CONTRACT_MAX_TOKENS: int = Field(default=3000, description="Max tokens per contract")

    # Request budgets
    CHAT_TIMEOUT_SECONDS: float = Field(default=30.0, description="Wall-clock budget for chat")
    ONBOARDING_TIMEOUT_SECONDS: float = Field(
        default=60.0, description="Wall-clock budget for onboarding"
    )

    # Pricing table (USD)
    LLM_INPUT_COST_PER_1K: float = Field(default=0.01, description="Prompt token price per 1K")
    LLM_OUTPUT_COST_PER_1K: float = Field(
        default=0.03, description="Completion token price per 1K"
    )
    EMBEDDING_COST_PER_1M: float = Field(default=0.02, description="Embedding price per 1M tokens")

    # Offline batch jobs only; request paths never wait on rate limits
    RATE_LIMIT_BACKOFF_SECONDS: float = Field(
        default=60.0, description="Wait before the single retry after a rate limit"
    )

    # Notifications
    NOTIFICATIONS_LIVE: bool | None = Field(
        default=None,
        description="Dispatch real notifications; defaults to true only in prod",
    )
    NOTIFICATION_WEBHOOK_URL: str | None = Field(
        default=None, description="Webhook receiving email/calendar/access payloads"
    )

    # Display-only baselines for the manual process
    MANUAL_ONBOARDING_HOURS: float = Field(
        default=4.0, description="Assumed manual onboarding time"
    )
    HR_ADMIN_HOURLY_RATE_USD: float = Field(default=50.0, description="Assumed HR admin rate")
    STATS_HOURS_SAVED_PER_EMPLOYEE: int = Field(
        default=4, description="Dashboard hours-saved multiplier"
    )

    # Organisation
    COMPANY_NAME: str = Field(default="HRFlow AI", description="Employer name on documents")
    HR_EMAIL: str = Field(default="hr@hrflow.ai", description="HR mailbox")
    IT_EMAIL: str = Field(default="it@hrflow.ai", description="IT mailbox")

    @property
    def is_production(self) -> bool:
        return self.HRFLOW_ENV == "prod"

    @property
    def notifications_live(self) -> bool:
        if self.NOTIFICATIONS_LIVE is None:
            return self.is_production
        return self.NOTIFICATIONS_LIVE


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
