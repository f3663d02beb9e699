"""
Centralised config for the FoundryLab planning core.

This module consolidates all configuration settings, loading values from
environment variables (or a `.env` file) and providing typed, validated
access to them through a singleton `settings` object.
"""

import os
from urllib.parse import quote_plus
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings.

    Pydantic's BaseSettings loads values from a `.env` file or from system
    environment variables. Every heuristic threshold used by the planner and
    the program inference lives here so it can be tuned without code changes.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False)

    # --- CORE SETTINGS ---
    # The root directory of the project (parent of the package directory).
    PROJECT_ROOT: Path = Path(__file__).parent.parent.resolve()
    ENVIRONMENT: str = "development"

    # --- EXERCISE CATALOG ---
    WGER_API_URL: str = "https://wger.de/api/v2"
    WGER_LANGUAGE_ID: int = 2  # English

    # --- DATABASE (from environment) ---
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: Optional[int] = 5432
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = Field(None, validate_default=True)

    # --- PROGRAM INFERENCE ---
    MIN_WORKOUTS_FOR_INFERENCE: int = 6
    MIN_DAYS_TRACKING: int = 10
    MIN_CONFIDENCE_TO_OFFER: float = 0.6
    EXERCISE_FREQUENCY_THRESHOLD: float = 0.3  # share of matching sessions
    MAX_EXERCISES_PER_DAY: int = 8
    HISTORY_WINDOW: int = 40  # most recent sessions analysed

    # --- PATTERN DETECTION ---
    MIN_WORKOUTS_FOR_PATTERNS: int = 4
    MIN_WORKOUTS_FOR_SPLIT: int = 6
    SPLIT_WINDOW: int = 20
    MIN_SPLIT_CONFIDENCE: float = 0.5
    MIN_RECOVERY_DAYS: int = 2

    # --- PERIODIZATION ---
    DEFAULT_DELOAD_FREQUENCY: int = 3  # loading blocks between deloads
    DEFAULT_BLOCK_WEEKS: int = 4

    def __init__(self, **values):
        super().__init__(**values)
        # Check for an explicit override for the host from the environment
        db_host = os.getenv("DB_HOST_OVERRIDE", self.POSTGRES_HOST)
        if self.POSTGRES_USER and self.POSTGRES_PASSWORD and db_host and self.POSTGRES_DB:
            # URL-encode user/pass to support special characters like @ and #
            user_enc = quote_plus(self.POSTGRES_USER)
            pass_enc = quote_plus(self.POSTGRES_PASSWORD)
            self.DATABASE_URL = (
                f"postgresql://{user_enc}:{pass_enc}@{db_host}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

    # --- FILE PATHS (derived from PROJECT_ROOT) ---
    @property
    def log_path(self) -> Path:
        return self.PROJECT_ROOT / "logs/foundry_history.log"

    @property
    def knowledge_path(self) -> Path:
        return self.PROJECT_ROOT / "knowledge"

    @property
    def workouts_path(self) -> Path:
        return self.knowledge_path / "workouts.json"

    @property
    def movement_memory_path(self) -> Path:
        return self.knowledge_path / "movement_memory.json"

    @property
    def exercise_catalog_path(self) -> Path:
        return self.knowledge_path / "catalog/exercises_en.json"

    @property
    def plans_path(self) -> Path:
        return self.knowledge_path / "plans"


# Create a single, importable instance of the settings
settings = Settings()
