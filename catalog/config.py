from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./services.db"
    REPOSITORY_BACKEND: str = "memory"
    REDIS_URL: str | None = None
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Cache TTLs
    CACHE_TTL_LIST: int = 60
    CACHE_TTL_DETAIL: int = 300

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
