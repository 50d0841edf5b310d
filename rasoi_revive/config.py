from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field
from typing import List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    # Gemini. An empty key is accepted here; every call then fails at call time.
    gemini_api_key: str = Field("", validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"))
    gemini_model_recipes: str = "gemini-2.5-flash"
    gemini_model_image: str = "gemini-2.5-flash-image"
    image_aspect_ratio: str = "4:3"

    # Prompting
    cuisine: str = "Indian"
    recipe_count: int = Field(3, ge=1)
    generate_images: bool = True

    # Storage (latency log only)
    data_dir: str = "data"
    metrics_enabled: bool = True

    # In-memory sessions, one per X-Device-Id
    max_sessions: int = Field(1000, ge=1)
    session_ttl_seconds: float = Field(3600, gt=0)

    log_level: str = "INFO"
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:5173"])

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")
