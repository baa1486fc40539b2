import re
from typing import Literal

from pydantic_settings import BaseSettings

_DURATION = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: str) -> int:
    """Convert a jsonwebtoken style duration ("30d", "12h", "900") to seconds."""
    match = _DURATION.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return int(amount) * _UNIT_SECONDS[unit]


class Settings(BaseSettings):
    APP_NAME: str = "TuitionDesk"
    ENV: Literal["development", "production", "test"] = "development"

    # Required: the app refuses to start without these
    SUPABASE_URL: str
    SUPABASE_KEY: str
    SUPABASE_SERVICE_KEY: str = ""
    JWT_SECRET: str
    JWT_EXPIRE: str
    PORT: int

    CLIENT_BASE_URL: str = "http://localhost:5173"
    MAX_FILE_SIZE: int = 10485760
    UPLOAD_PATH: str = "uploads"
    LOG_LEVEL: str = "info"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def jwt_expire_seconds(self) -> int:
        return parse_duration(self.JWT_EXPIRE)

    @property
    def cors_options(self) -> dict:
        return {
            "allow_origins": [self.CLIENT_BASE_URL],
            "allow_credentials": True,
            "allow_methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-CSRF-Token"],
            "expose_headers": ["X-CSRF-Token"],
        }


settings = Settings()
