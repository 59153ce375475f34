from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Quiz generation (Gemini)
    GEMINI_API_KEY: str = Field("", description="Gemini API key for quiz generation")
    GEMINI_MODEL: str = Field("gemini-2.5-flash", description="Gemini model to use")
    QUESTION_SOURCE_TIMEOUT_SECONDS: float = 30.0

    # Intent detection (Dialogflow)
    DIALOGFLOW_PROJECT_ID: str = Field("kakapo-chat-bot", description="Dialogflow agent project")
    DIALOGFLOW_LANGUAGE_CODE: str = "en"
    GOOGLE_CREDENTIALS_PATH: str = Field("", description="Service account key file; derived from RENDER when empty")
    RENDER: bool = Field(False, description="Set by the Render platform")
    INTENT_RELAY_TIMEOUT_SECONDS: float = 10.0

    # Session storage
    SESSION_BACKEND: str = Field("memory", description="memory or redis")
    REDIS_URL: str = Field("redis://localhost:6379/0")
    QUIZ_SESSION_TTL_SECONDS: int = 3600
    SESSION_LOCK_TIMEOUT_SECONDS: float = 120.0  # lease, must outlive a quiz generation
    SESSION_LOCK_WAIT_SECONDS: float = 35.0

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # Environment
    ENV: str = "production"  # development, staging, production
    DEBUG: bool = False

    @property
    def credentials_path(self) -> str:
        if self.GOOGLE_CREDENTIALS_PATH:
            return self.GOOGLE_CREDENTIALS_PATH
        if self.RENDER:
            return "/etc/secrets/service-account-key.json"
        return "./service-account-key.json"

settings = Settings()
