# smartguard/settings.py
import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="SmartGuard")
    ENV: str = Field(default=os.getenv("APP_ENV", "dev"))
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # provider: "gemini", "openai" or "echo"
    PROVIDER: str = Field(default="gemini")

    # the single credential; missing key is logged, not fatal
    API_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY"),
    )
    IMAGE_MODEL: str = Field(default="gemini-2.5-flash-image")
    TEXT_MODEL: str = Field(default="gemini-2.5-flash")

    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = Field(default="gpt-4o-mini")
    OPENAI_IMAGE_MODEL: str = Field(default="gpt-image-1")

    # gateway
    GATEWAY_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)
    MAX_PLACES: int = Field(default=5, ge=0)

    # front-end policy
    EMERGENCY_NUMBER: str = Field(default="112")
    MAX_UPLOAD_BYTES: int = Field(default=10 * 1024 * 1024, gt=0)

    # sessions live in memory; idle ones are evicted
    SESSION_TTL_SECONDS: float = Field(default=3600.0, gt=0)
    MAX_SESSIONS: int = Field(default=1000, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env.dev",
        extra="ignore",
    )

    @property
    def app_name(self) -> str:
        return self.APP_NAME

    @property
    def provider(self) -> str:
        return (self.PROVIDER or "").strip().lower()

    @property
    def has_api_key(self) -> bool:
        if self.provider == "openai":
            return bool(self.OPENAI_API_KEY)
        return bool(self.API_KEY)


settings = Settings()
