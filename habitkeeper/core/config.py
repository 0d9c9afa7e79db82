import secrets
import warnings

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """HabitKeeper settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "HabitKeeper"
    debug: bool = False

    # Storage
    database_url: str = "postgresql+asyncpg://localhost:5432/habitkeeper"
    database_echo: bool = False

    # Tokens
    secret_key: str = ""
    access_token_expire_minutes: int = Field(default=60 * 24 * 7, gt=0)

    # HTTP
    cors_origins: list[str] = ["*"]

    # Schedule an achievement check after each completion or progress change
    evaluate_on_mutation: bool = True

    @model_validator(mode="after")
    def require_secret_key(self) -> "Settings":
        """Refuse to start without SECRET_KEY unless running in debug mode."""
        if self.secret_key:
            return self
        if not self.debug:
            raise ValueError(
                "SECRET_KEY is not set. Tokens cannot be signed without it; "
                "set it in the environment or in .env"
            )
        self.secret_key = secrets.token_urlsafe(32)
        warnings.warn(
            "SECRET_KEY not set, signing tokens with a throwaway key for this process",
            stacklevel=2,
        )
        return self


settings = Settings()
