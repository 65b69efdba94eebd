import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:

    mongo_url: str
    mongo_db_name: str
    jwt_secret: str
    jwt_algorithm: str
    access_token_expire_minutes: int
    google_api_key: str | None
    gemini_model: str
    fcm_service_account_file: str | None
    fcm_project_id: str | None
    log_level: str
    poll_interval_seconds: float


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        mongo_url=os.getenv("MONGO_URL", "mongodb://localhost:27017"),
        mongo_db_name=os.getenv("MONGO_DB_NAME", "medpanel"),
        jwt_secret=os.getenv("JWT_SECRET", "medpanel-dev-secret-change-me-in-production"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")),
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        fcm_service_account_file=os.getenv("FCM_SERVICE_ACCOUNT_FILE") or None,
        fcm_project_id=os.getenv("FCM_PROJECT_ID") or None,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        poll_interval_seconds=float(os.getenv("POLL_INTERVAL_SECONDS", "10")),
    )
