from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./crm.db"
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: Optional[str] = None
    LOG_DIR: Optional[str] = None
    LOG_LEVEL: str = "INFO"
    STUDENTS_PAGE_SIZE: int = 8
    LESSONS_PAGE_SIZE: int = 6
    # Off by default: a teacher may book a lesson for any existing student.
    ENFORCE_STUDENT_OWNERSHIP: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
