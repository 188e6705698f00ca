"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Dict


class Settings(BaseSettings):
    """Application settings"""

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Open Trivia DB question service
    trivia_api_url: str = "https://opentdb.com/api.php"
    trivia_question_amount: int = 5
    trivia_timeout: float = 10.0

    # Survey topic -> trivia category id. Topics missing here get no questions.
    topic_categories: Dict[str, int] = {
        "Technology": 18,  # Science: Computers
        "Health": 17,  # Science & Nature
        "Education": 9,  # General Knowledge
    }

    # Start a fresh form once the confirmation popup is closed
    reset_form_on_close: bool = True

    # In-memory sessions: dropped after this many idle seconds, oldest evicted past the cap
    session_idle_ttl: float = 3600.0
    max_sessions: int = 10000

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
