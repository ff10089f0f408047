from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_FILE = BASE_DIR / '.env'


class SessionCookieConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix='SESSION_',
        env_file=ENV_FILE,
        extra='ignore',  # Ignore extra environment variables
    )
    name: str = 'dashboard_session'
    secure: bool = False
    max_age: int = 60 * 60 * 24


class Config(BaseSettings):
    app_name: str = "AI Detector Dashboard"
    debug: bool = True

    # Remote detector service
    api_base_url: str = "http://127.0.0.1:8000"
    request_timeout: float = 30.0

    # Navigation
    login_path: str = "/login"
    session_expired_message: str = "Session expired"
    default_history_limit: int = 20

    # Nested configs
    session_cookie: SessionCookieConfig = SessionCookieConfig()

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


config = Config()
