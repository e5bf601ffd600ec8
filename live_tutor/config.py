import logging
import os
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv() # Load environment variables from .env file at the start


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    """Runtime settings, read from LIVE_TUTOR_* environment variables."""
    model: str = "models/gemini-2.0-flash-exp"
    voice_name: str = "Puck"
    response_modalities: str = "audio"
    default_lesson: str = "roblox_studio_intro"
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            model=os.environ.get("LIVE_TUTOR_MODEL", defaults.model),
            voice_name=os.environ.get("LIVE_TUTOR_VOICE", defaults.voice_name),
            response_modalities=os.environ.get("LIVE_TUTOR_RESPONSE_MODALITIES", defaults.response_modalities),
            default_lesson=os.environ.get("LIVE_TUTOR_DEFAULT_LESSON", defaults.default_lesson),
            cors_origins=_split_csv(os.environ.get("LIVE_TUTOR_CORS_ORIGINS", ",".join(defaults.cors_origins))),
            log_level=os.environ.get("LIVE_TUTOR_LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Keep the server libraries at the same verbosity as ours
    for logger_name in ["uvicorn", "uvicorn.error", "fastapi"]:
        logging.getLogger(logger_name).setLevel(level.upper())
