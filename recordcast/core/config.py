from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RECORDCAST_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)
    APP_DEBUG: bool = True

    # Identifier strategy
    ID_UPPER_BOUND: int = 10_000_000

    @property
    def is_production(self) -> bool:
        return not self.APP_DEBUG


@lru_cache
def get_settings() -> Settings:
    return Settings()
