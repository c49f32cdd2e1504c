from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "TongueSpace API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 2  # 2 days

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500"
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: str = "5432"
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = ""
    DATABASE_NAME: str = "tonguespace"

    DATABASE_URL: str = "sqlite:///./tonguespace.db"
    TEST_DATABASE_URL: Optional[str] = None

    def __init__(self, **data):
        super().__init__(**data)
        if self.DATABASE_HOST:
            self.DATABASE_URL = (
                f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
            )

    # Email
    EMAILS_ENABLED: bool = False
    SENDGRID_API_KEY: Optional[str] = None
    EMAILS_FROM_EMAIL: str = "noreply@tonguespace.com"
    EMAILS_FROM_NAME: str = "TongueSpace"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Bootstrap accounts used by scripts/seed.py
    SEED_ADMIN_EMAIL: str = "admin@tonguespace.com"
    SEED_INSTRUCTOR_EMAIL: str = "instructor@tonguespace.com"

    class Config:
        env_file = ".env"

settings = Settings()
