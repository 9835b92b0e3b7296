"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Auth - shared secret used to verify bearer tokens
    jwt_secret: str = "dev_secret_change_me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Ollama (job skill extraction)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    # Outbound calls: every third-party request is bounded by this timeout
    llm_timeout_seconds: float = 15.0
    llm_max_attempts: int = 3

    # Skill-gap learning resources; bundled table is used when unset
    learning_resources_path: str | None = None

    # Application
    app_name: str = "Job Pipeline ATS"
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    frontend_cors_origin: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def is_sqlite(self) -> bool:
        """SQLite URLs (local dev, tests) do not accept queue pool sizing."""
        return self.database_url.startswith("sqlite")


# Global settings instance
settings = Settings()
