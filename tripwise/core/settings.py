import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    ollama_url: str = os.getenv("OLLAMA_URL", "http://127.0.0.1:11434")
    ollama_model: str = os.getenv("OLLAMA_MODEL", "llama3.2:3b")
    google_places_api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")

    places_timeout_seconds: float = float(os.getenv("PLACES_TIMEOUT_SECONDS", "8"))
    probe_timeout_seconds: float = float(os.getenv("PROBE_TIMEOUT_SECONDS", "3"))
    generation_timeout_seconds: float = float(os.getenv("GENERATION_TIMEOUT_SECONDS", "60"))
    chat_timeout_seconds: float = float(os.getenv("CHAT_TIMEOUT_SECONDS", "30"))

    ai_max_days: int = int(os.getenv("AI_MAX_DAYS", "3"))
    max_trip_days: int = int(os.getenv("MAX_TRIP_DAYS", "60"))
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "5"))

    mongodb_uri: str = os.getenv("MONGODB_URI", "")
    database_name: str = os.getenv("DATABASE_NAME", "tripwise")

    allowed_origins: str = os.getenv("ALLOWED_ORIGINS", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()
