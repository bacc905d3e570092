"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "hiring_user"
    postgres_password: str = "password"
    postgres_db: str = "hiring_db"

    # Full SQLAlchemy URL; wins over the postgres_* fields when set
    database_url: Optional[str] = None

    # MongoDB (resume files + raw AI output)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "hiring_docs"
    resume_bucket: str = "resumes"

    # LLM (any OpenAI-compatible endpoint)
    llm_api_key: str = ""
    llm_base_url: str = "https://api.openai.com/v1"
    llm_model: str = "gpt-4o-mini"
    llm_temperature: float = 0.0
    llm_max_tokens: int = 1200

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60

    # Uploads
    max_resume_size_mb: int = 5

    # App
    cors_origins: List[str] = ["http://localhost:5173"]
    debug: bool = False
    log_level: str = "INFO"

    @property
    def sqlalchemy_url(self) -> str:
        """Construct the relational database URL"""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
