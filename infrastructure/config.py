"""Application settings, read from the environment (and an optional .env file)"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


def _split_ids(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    # Storage
    reservation_backend: str = Field(default="memory", pattern="^(memory|file)$")
    reservations_file: str = "./data/reservations.json"

    # JWT
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=30, ge=1)

    # Lookup seeds
    known_rooms: List[str] = []
    inactive_rooms: List[str] = []
    known_requesters: List[str] = []

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            reservation_backend=os.getenv("RESERVATION_BACKEND", "memory").lower(),
            reservations_file=os.getenv("RESERVATIONS_FILE", "./data/reservations.json"),
            secret_key=os.getenv("SECRET_KEY", "change-me-in-production"),
            algorithm=os.getenv("ALGORITHM", "HS256"),
            access_token_expire_minutes=os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"),
            known_rooms=_split_ids(os.getenv("KNOWN_ROOMS")),
            inactive_rooms=_split_ids(os.getenv("INACTIVE_ROOMS")),
            known_requesters=_split_ids(os.getenv("KNOWN_REQUESTERS")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )
