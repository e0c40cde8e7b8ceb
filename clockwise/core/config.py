# clockwise/core/config.py
from typing import List

from pydantic_settings import BaseSettings; from dotenv import load_dotenv
load_dotenv()
class Settings(BaseSettings):
    DATABASE_URL: str; SUPABASE_URL: str; SUPABASE_SERVICE_ROLE_KEY: str
    SUPABASE_JWT_SECRET: str; JWT_ALGORITHM: str = "HS256"; JWT_AUDIENCE: str = "authenticated"
    AUTH_HTTP_TIMEOUT: float = 30
    DEFAULT_DAILY_TARGET_MINUTES: int = 8 * 60
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
settings = Settings()
