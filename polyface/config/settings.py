from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    APP_NAME: str = "PolyFace API"
    APP_VERSION: str = "1.2.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = True
    API_V1_PREFIX: str = "/api/v1"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
        "https://polyfacevolleyball.com",
        "https://app.polyfacevolleyball.com",
    ]

    # Firebase (Firestore, Auth, Storage)
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_CREDENTIALS_PATH: str = ""
    FIREBASE_CREDENTIALS_JSON: str = ""
    FIREBASE_STORAGE_BUCKET: str = ""  # e.g. polyface-app.appspot.com

    # Cloud Functions (callable remote procedures)
    FUNCTIONS_REGION: str = "us-central1"
    FUNCTIONS_BASE_URL: str = ""  # Overrides region/project, e.g. http://127.0.0.1:5001/<project>/us-central1
    FUNCTIONS_TIMEOUT_SECONDS: float = 30.0

    # Venue / display
    FEATURED_TRAINER_NAME: str = "Jeff"
    VENUE_NAME: str = "Polyface Volleyball Academy"
    VENUE_CITY_STATE_ZIP: str = ""

    # Observability (GlitchTip/Sentry)
    GLITCHTIP_DSN: str = ""
    GLITCHTIP_TRACES_SAMPLE_RATE: float = 0.2
    GLITCHTIP_PROFILES_SAMPLE_RATE: float = 0.1

    @property
    def functions_base_url(self) -> str:
        """Base URL for callable functions, honoring an explicit override."""
        if self.FUNCTIONS_BASE_URL:
            return self.FUNCTIONS_BASE_URL.rstrip("/")
        return f"https://{self.FUNCTIONS_REGION}-{self.FIREBASE_PROJECT_ID}.cloudfunctions.net"

    @property
    def firebase_configured(self) -> bool:
        return bool(self.FIREBASE_CREDENTIALS_PATH or self.FIREBASE_CREDENTIALS_JSON)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
