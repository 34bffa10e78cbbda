import os
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: Optional[str] = Field(None, alias="SANDBOX_DATABASE_URL")
    database_pool_size: int = Field(5, alias="SANDBOX_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(5, alias="SANDBOX_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="SANDBOX_DATABASE_ECHO")
    allow_remote_database: bool = Field(False, alias="SANDBOX_ALLOW_REMOTE_DATABASE")

    teacher_email: str = Field("teacher@example.com", alias="SEED_TEACHER_EMAIL")
    group_ids: List[int] = Field(default_factory=lambda: [1, 3], alias="SANDBOX_GROUP_IDS")
    group_codes: Dict[int, str] = Field(
        default_factory=lambda: {1: "6035", 3: "6704"},
        alias="SANDBOX_GROUP_CODES",
    )
    module_ids: List[Optional[int]] = Field(default_factory=lambda: [10, 11], alias="SANDBOX_MODULE_IDS")

    students_to_create: int = Field(13, ge=0, alias="SANDBOX_STUDENTS_TO_CREATE")
    standalone_lessons_to_create: int = Field(2, ge=0, alias="SANDBOX_STANDALONE_LESSONS")
    lessons_to_create: int = Field(5, ge=0, alias="SANDBOX_LESSONS_TO_CREATE")
    questions_per_lesson: int = Field(4, ge=1, alias="SANDBOX_QUESTIONS_PER_LESSON")
    assessments_to_create: int = Field(2, ge=0, alias="SANDBOX_ASSESSMENTS_TO_CREATE")
    questions_per_assessment: int = Field(3, ge=1, alias="SANDBOX_QUESTIONS_PER_ASSESSMENT")
    days_to_seed: int = Field(45, ge=1, alias="SANDBOX_DAYS_TO_SEED")
    seed_timezone: str = Field("UTC", alias="SANDBOX_SEED_TIMEZONE")
    random_seed: Optional[int] = Field(None, alias="SANDBOX_RANDOM_SEED")

    pacing_api_url: str = Field("https://solvescoaching.com", alias="SOLVES_COACHING_BASE_URL")
    pacing_api_key: Optional[str] = Field(None, alias="SOLVES_COACHING_API_KEY")
    pacing_api_timeout_seconds: float = Field(15.0, alias="SOLVES_COACHING_TIMEOUT_SECONDS")
    points_reward_goal: int = Field(750, alias="SANDBOX_POINTS_REWARD_GOAL")
    points_reward_description: str = Field(
        "Pizza party when we reach our goal!",
        alias="SANDBOX_POINTS_REWARD_DESCRIPTION",
    )
    student_points_target: int = Field(100, alias="SANDBOX_STUDENT_POINTS_TARGET")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid seed configuration: {exc}") from exc
