# anonychat/settings.py
from __future__ import annotations

from pydantic import BaseModel
import os


class Settings(BaseModel):
    APP_NAME: str = "anonychat-server"

    # Redis (profile store, violations, chat logs)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_PREFIX: str = "anon"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Dev
    LOG_LEVEL: str = "INFO"

    # Messaging gateway (outbound send)
    GATEWAY_URL: str = "http://localhost:3001"
    GATEWAY_TOKEN: str = ""
    GATEWAY_TIMEOUT_SEC: float = 10.0

    # Text generation service (quiz questions, AI fallback replies)
    TEXTGEN_URL: str = "http://localhost:8080/generate"
    TEXTGEN_MODEL: str = ""
    TEXTGEN_API_KEY: str = ""
    TEXTGEN_TIMEOUT_SEC: float = 20.0

    # Matchmaking / relay
    QUEUE_TIMEOUT_SEC: float = 20.0
    RELAY_DELAY_MS: int = 1500
    REPORT_HISTORY: int = 10

    # Quiz
    QUIZ_TIMEOUT_SEC: float = 60.0
    XP_MIN: int = 10
    XP_MAX: int = 25
    TIER_SIZE: int = 100

    # Broadcast jitter between two sends
    BROADCAST_MIN_DELAY_SEC: float = 3.0
    BROADCAST_MAX_DELAY_SEC: float = 11.0

    # Moderation: optional word list file, one word per line
    BAD_WORDS_FILE: str = ""

    # Comma-separated ids created with the admin role
    ADMIN_IDS: str = ""

    def admin_ids(self) -> set[str]:
        return {x.strip() for x in self.ADMIN_IDS.split(",") if x.strip()}


def get_settings() -> Settings:
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "anonychat-server"),
        REDIS_URL=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
        REDIS_PREFIX=os.getenv("REDIS_PREFIX", "anon"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=int(os.getenv("PORT", "8000")),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),

        GATEWAY_URL=os.getenv("GATEWAY_URL", "http://localhost:3001"),
        GATEWAY_TOKEN=os.getenv("GATEWAY_TOKEN", ""),
        GATEWAY_TIMEOUT_SEC=float(os.getenv("GATEWAY_TIMEOUT_SEC", "10")),

        TEXTGEN_URL=os.getenv("TEXTGEN_URL", "http://localhost:8080/generate"),
        TEXTGEN_MODEL=os.getenv("TEXTGEN_MODEL", ""),
        TEXTGEN_API_KEY=os.getenv("TEXTGEN_API_KEY", ""),
        TEXTGEN_TIMEOUT_SEC=float(os.getenv("TEXTGEN_TIMEOUT_SEC", "20")),

        QUEUE_TIMEOUT_SEC=float(os.getenv("QUEUE_TIMEOUT_SEC", "20")),
        RELAY_DELAY_MS=int(os.getenv("RELAY_DELAY_MS", "1500")),
        REPORT_HISTORY=int(os.getenv("REPORT_HISTORY", "10")),

        QUIZ_TIMEOUT_SEC=float(os.getenv("QUIZ_TIMEOUT_SEC", "60")),
        XP_MIN=int(os.getenv("XP_MIN", "10")),
        XP_MAX=int(os.getenv("XP_MAX", "25")),
        TIER_SIZE=int(os.getenv("TIER_SIZE", "100")),

        BROADCAST_MIN_DELAY_SEC=float(os.getenv("BROADCAST_MIN_DELAY_SEC", "3")),
        BROADCAST_MAX_DELAY_SEC=float(os.getenv("BROADCAST_MAX_DELAY_SEC", "11")),

        BAD_WORDS_FILE=os.getenv("BAD_WORDS_FILE", ""),
        ADMIN_IDS=os.getenv("ADMIN_IDS", ""),
    )
