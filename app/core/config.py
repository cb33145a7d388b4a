from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_TITLE: str = "Bracket Manager API"
    DATABASE_URL: str = "sqlite:///./brackets.db"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]
    DEFAULT_SEEDING_MODE: str = "random" # "random" or "seeded"

    class Config:
        env_file = ".env"

settings = Settings()
