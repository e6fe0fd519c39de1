from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Ministry LMS Progression API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: str = "5432"
    DATABASE_USER: str = "lms"
    DATABASE_PASSWORD: str = "lms"
    DATABASE_NAME: str = "lms"

    DATABASE_URL: str = ""
    TEST_DATABASE_URL: Optional[str] = None

    # When false the schema is assumed to carry every optional feature column
    SCHEMA_AUTODETECT: bool = True

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    SLOW_REQUEST_MS: int = 1000

    # Background jobs
    SCHEDULER_ENABLED: bool = True
    OVERDUE_REFRESH_INTERVAL_MINUTES: int = 60
    MINISTRY_STATS_REFRESH_HOUR: int = 1

    def __init__(self, **data):
        super().__init__(**data)
        if not self.DATABASE_URL:
            self.DATABASE_URL = (
                f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
            )

    class Config:
        env_file = ".env"

settings = Settings()
