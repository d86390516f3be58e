import secrets
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: str = Field(default="development", alias="ENVIRONMENT")
    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Signed-cookie session backing the XSRF secret
    session_secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32), alias="SESSION_SECRET_KEY")
    session_cookie: str = Field(default="session", alias="SESSION_COOKIE")

    # XSRF guard
    xsrf_ignored_methods: str = Field(default="get,head,options", alias="XSRF_IGNORED_METHODS")
    xsrf_cookie_name: str = Field(default="XSRF-TOKEN", alias="XSRF_COOKIE_NAME")
    xsrf_header_name: str = Field(default="X-XSRF-TOKEN", alias="XSRF_HEADER_NAME")
    xsrf_session_key: str = Field(default="XSRF-SECRET", alias="XSRF_SESSION_KEY")
    xsrf_cookie_path: str = Field(default="/", alias="XSRF_COOKIE_PATH")
    xsrf_cookie_secure: bool = Field(default=False, alias="XSRF_COOKIE_SECURE")
    xsrf_cookie_samesite: str = Field(default="lax", alias="XSRF_COOKIE_SAMESITE")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @field_validator("xsrf_cookie_samesite")
    @classmethod
    def _check_samesite(cls, value: str) -> str:
        value = value.lower()
        if value not in {"lax", "strict", "none"}:
            raise ValueError(f"Unsupported SameSite value: {value}")
        return value

    @property
    def ignored_methods(self) -> frozenset[str]:
        return frozenset(m.strip().lower() for m in self.xsrf_ignored_methods.split(",") if m.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
