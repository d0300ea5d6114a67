"""Web frontend configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    GEOAPIFY_API_KEY: str = ""
    REDIS_URL: str = "redis://redis:6379/0"
    DELIVERY_API_URL: str = "http://delivery:8080/api"
    HTTP_TIMEOUT_SEC: float = 10.0
    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
